"""
Dil analizi raporu: sonuç JSON → görünüm modeli → Jinja2 HTML → WeasyPrint → PDF bytes.
"""
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from tonguemap.schemas.analysis import AnalysisResult
from tonguemap.services.report_view import build_report_context

# Şablon dizini: tonguemap/templates
_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
_ENV = Environment(
    loader=FileSystemLoader(str(_TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_report_html(result: AnalysisResult | dict, report_date: str | None = None) -> str:
    context = build_report_context(result, report_date=report_date)
    return _ENV.get_template("report.html").render(**context)


def render_pdf(html_str: str) -> bytes:
    """WeasyPrint lazy import: sistem kütüphaneleri sunucu başlarken gerekmez."""
    from weasyprint import HTML

    return HTML(string=html_str, base_url=str(_TEMPLATES_DIR)).write_pdf()


def build_report_pdf(result: AnalysisResult | dict, report_date: str | None = None) -> bytes:
    return render_pdf(render_report_html(result, report_date=report_date))
