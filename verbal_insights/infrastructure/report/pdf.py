"""
PDF report rendering for analysis results.

Layout runs top-down with a vertical cursor in millimetres; a block that
would cross the bottom margin starts a new page.
"""
import logging
import os
from io import BytesIO
from typing import List, Optional, Union

import requests
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from ...config import (
    REPORT_BRAND, REPORT_TITLE, REPORT_LOGO_URL,
    PDF_MARGIN_MM, PDF_LINE_HEIGHT_MM, PDF_LOGO_SIZE_MM, PDF_LOGO_TIMEOUT, PDF_RULE_GRAY,
)
from ...coaching.schemas import AnalysisResult

logger = logging.getLogger("report")

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"


def _num(value: Union[int, float]) -> str:
    """Render 7.0 as '7' and 7.5 as '7.5'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


class _PageCursor:
    """Canvas wrapper that tracks the vertical position from the top edge."""

    def __init__(self, buffer: BytesIO, margin: float, line_height: float, compress: bool = True):
        self.canvas = canvas.Canvas(buffer, pagesize=A4, pageCompression=int(compress))
        self.width_mm = A4[0] / mm
        self.height_mm = A4[1] / mm
        self.margin = margin
        self.line_height = line_height
        self.y = margin
        self.pages = 1
        self.font(FONT, 12)

    @property
    def usable_width(self) -> float:
        return self.width_mm - 2 * self.margin

    def check(self, increment: float = 0):
        """Start a new page if the next block would cross the bottom margin."""
        if self.y > self.margin and self.y + increment > self.height_mm - self.margin:
            self.canvas.showPage()
            self.pages += 1
            self.y = self.margin
            # a new page starts with the default font
            self.canvas.setFont(*self._font)

    def font(self, name: str, size: int):
        self.canvas.setFont(name, size)
        self._font = (name, size)

    def text(self, text: str, x: float, y: Optional[float] = None):
        self.canvas.drawString(x * mm, (self.height_mm - (self.y if y is None else y)) * mm, text)

    def centered(self, text: str):
        self.canvas.drawCentredString(self.width_mm / 2 * mm, (self.height_mm - self.y) * mm, text)

    def wrap(self, text: str, width: float) -> List[str]:
        name, size = self._font
        lines: List[str] = []
        for paragraph in (text or "").splitlines() or [""]:
            lines.extend(simpleSplit(paragraph, name, size, width * mm) or [""])
        return lines

    def lines(self, lines: List[str], x: float):
        """Draw wrapped lines and advance the cursor past them."""
        self.check(len(lines) * self.line_height)
        for line in lines:
            self.check(self.line_height)
            self.text(line, x)
            self.y += self.line_height

    def rule(self):
        self.canvas.setStrokeGray(PDF_RULE_GRAY)
        self.canvas.line(self.margin * mm, (self.height_mm - self.y) * mm,
                         (self.width_mm - self.margin) * mm, (self.height_mm - self.y) * mm)


class ReportExporter:
    """Renders an AnalysisResult as an A4 PDF."""

    def __init__(self,
                 logo_url: Optional[str] = REPORT_LOGO_URL,
                 brand: str = REPORT_BRAND,
                 title: str = REPORT_TITLE,
                 margin: float = PDF_MARGIN_MM,
                 line_height: float = PDF_LINE_HEIGHT_MM,
                 compress: bool = True):
        self.logo_url = logo_url
        self.brand = brand
        self.title = title
        self.margin = margin
        self.line_height = line_height
        self.compress = compress
        self.page_count = 0

    def export(self, result: AnalysisResult, path: Optional[str] = None) -> bytes:
        """
        Render the report.

        Args:
            result: Analysis to render
            path: Where to write the PDF; nothing is written if omitted

        Returns:
            PDF bytes
        """
        buffer = BytesIO()
        page = _PageCursor(buffer, self.margin, self.line_height, self.compress)

        self._header(page)
        self._overall(page, result)
        if result.highlighted_transcription:
            self._transcription(page, result)
        self._metrics(page, result)
        self._feedback(page, result)
        if result.suggested_speech:
            self._suggested(page, result.suggested_speech)

        page.canvas.save()
        self.page_count = page.pages
        data = buffer.getvalue()

        if path:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
            logger.info("Report written to %s (%d pages)", path, self.page_count)
        return data

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def _fetch_logo(self) -> Optional[ImageReader]:
        if not self.logo_url:
            return None
        try:
            resp = requests.get(self.logo_url, timeout=PDF_LOGO_TIMEOUT)
            resp.raise_for_status()
            return ImageReader(BytesIO(resp.content))
        except Exception as e:
            logger.warning("Could not add logo to PDF: %s", e)
            return None

    def _header(self, page: _PageCursor):
        m = self.margin
        logo = self._fetch_logo()
        page.font(FONT_BOLD, 16)
        if logo is not None:
            size = PDF_LOGO_SIZE_MM
            page.canvas.drawImage(logo, m * mm, (page.height_mm - page.y - size) * mm,
                                  width=size * mm, height=size * mm, mask="auto")
            page.text(self.brand, m + size + 5, page.y + 10)
        else:
            page.text(self.brand, m, page.y + 10)
        page.y += 30

        page.font(FONT_BOLD, 22)
        page.centered(self.title)
        page.y += self.line_height * 2

    def _section_title(self, page: _PageCursor, title: str):
        page.font(FONT_BOLD, 16)
        page.text(title, self.margin)
        page.y += self.line_height
        page.rule()
        page.y += self.line_height

    def _overall(self, page: _PageCursor, result: AnalysisResult):
        self._section_title(page, "Overall Assessment")
        page.font(FONT, 12)
        page.text(f"Total Score: {_num(result.total_score)}/100", self.margin)
        page.y += self.line_height

        page.lines(page.wrap(result.overall_assessment, page.usable_width), self.margin)
        page.y += self.line_height

    def _transcription(self, page: _PageCursor, result: AnalysisResult):
        page.check(self.line_height * 3)
        self._section_title(page, "Full Transcription")
        page.font(FONT, 10)
        text = " ".join(s.text for s in result.highlighted_transcription)
        page.lines(page.wrap(text, page.usable_width), self.margin)
        page.y += self.line_height

    def _metrics(self, page: _PageCursor, result: AnalysisResult):
        md = result.metadata
        page.check(self.line_height * 2)
        self._section_title(page, "Key Metrics")
        page.font(FONT, 12)
        metrics = [
            f"Word Count: {md.word_count}",
            f"Filler Words: {md.filler_word_count}",
            f"Speech Rate (WPM): {_num(md.speech_rate_wpm)}",
            f"Pitch Variance: {md.pitch_variance:.2f}",
            f"Average Pause (ms): {_num(md.average_pause_duration_ms)}",
            f"Pace Score: {_num(md.pace_score)}/100",
            f"Clarity Score: {_num(md.clarity_score)}/100",
            f"Pause Time: {md.pause_percentage:.1f}%",
        ]
        if md.audio_duration_seconds:
            metrics.append(f"Audio Duration (s): {md.audio_duration_seconds:.2f}")

        for metric in metrics:
            page.check()
            page.text(metric, self.margin)
            page.y += self.line_height
        page.y += self.line_height

    def _feedback(self, page: _PageCursor, result: AnalysisResult):
        page.check(self.line_height * 2)
        self._section_title(page, "Detailed Feedback")
        indent = self.margin + 5
        width = page.usable_width - 5

        for category, items in result.grouped_criteria().items():
            page.check(self.line_height * 2)
            page.font(FONT_BOLD, 14)
            page.text(category.value, self.margin)
            page.y += self.line_height

            for item in items:
                page.check(self.line_height * 5)
                page.font(FONT_BOLD, 12)
                page.text(f"{item.criteria.value} - Score: {_num(item.score)}/10", indent)
                page.y += self.line_height

                page.font(FONT, 11)
                paragraphs = [f"Evaluation: {item.evaluation}"]
                if item.comparison:
                    paragraphs.append(f"Comparison: {item.comparison}")
                paragraphs.append(f"Feedback: {item.feedback}")

                for paragraph in paragraphs:
                    page.lines(page.wrap(paragraph, width), indent)
                page.y += self.line_height / 2

    def _suggested(self, page: _PageCursor, suggested: str):
        page.check(self.line_height * 3)
        self._section_title(page, "Suggested Delivery Example")
        page.font(FONT_ITALIC, 12)
        page.lines(page.wrap(suggested, page.usable_width), self.margin)
