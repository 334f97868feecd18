#!/usr/bin/env python3
"""
Example: Fallback Fonts for Mixed Scripts

Downloads Noto fonts from Google Fonts (cached under ~/.cache/pdf-textbox) and
uses them as fallbacks for glyphs the base font lacks.
"""

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from textbox import Document, resolve_font, text_box

latin = resolve_font("Noto Sans:400")
japanese = resolve_font("Noto Sans JP:400")
if japanese == "Helvetica":
    print("Error: could not download Noto Sans JP; check your network connection")
    exit(1)

pdf = canvas.Canvas("fallback_fonts.pdf", pagesize=letter)
doc = Document(pdf, font=latin, font_size=16, fallback_fonts=[japanese])

text_box(doc, "Tracklist: 夜に駆ける / Racing into the Night", at=(72, 720), width=400, height=40)

pdf.showPage()
pdf.save()
print("✓ Saved to fallback_fonts.pdf")
