#!/usr/bin/env python3
"""
Simple Example: Styled Text in a Box

The simplest way to draw formatted text into a fixed rectangle on a page.
"""

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from textbox import Document, formatted_text_box

pdf = canvas.Canvas("simple_box.pdf", pagesize=letter)
doc = Document(pdf, font_size=14)

leftover = formatted_text_box(
    doc,
    [
        {"text": "Boxes ", "styles": ["bold"]},
        {"text": "wrap styled runs, "},
        {"text": "underline", "styles": ["underline"], "color": "1F6FEB"},
        {"text": " them, and link them to the "},
        {"text": "ReportLab docs", "link": "https://docs.reportlab.com/"},
        {"text": ". Text that does not fit is handed back to you."},
    ],
    at=(72, 720),
    width=240,
    height=60,
)

pdf.showPage()
pdf.save()

print("✓ Saved to simple_box.pdf")
if leftover:
    print(f"  Did not fit: {''.join(run.text for run in leftover)!r}")
