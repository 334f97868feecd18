#!/usr/bin/env python3
"""
Example: Shrink to Fit, Flowing Columns and Rotation

Shows the three ways of handling text that is too long for its box: shrinking
the font, flowing leftovers into the next box, and measuring with a dry run.
"""

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from textbox import Document, TextBox, text_box

STORY = (
    "The tape hiss rose as the reels turned, and somewhere under it a melody "
    "started to take shape. Nobody in the room moved. When the last chord "
    "faded the engineer finally exhaled and reached for the stop button. "
) * 3

pdf = canvas.Canvas("shrink_and_flow.pdf", pagesize=letter)
doc = Document(pdf, font="Times-Roman", font_size=12)

# =============================================================================
# Shrink the font until the whole story fits
# =============================================================================
box = TextBox(
    [{"text": STORY}],
    document=doc,
    at=(72, 720),
    width=220,
    height=120,
    overflow="shrink_to_fit",
    min_font_size=6,
    align="justify",
)
box.render()
print(f"Shrunk to {box.state.font_size:g}pt after {len(box.state.font_sizes_tried)} pass(es)")

# =============================================================================
# Flow leftovers from one column into the next
# =============================================================================
runs = [{"text": STORY}]
for column_x in (320, 420, 520):
    runs = TextBox(runs, document=doc, at=(column_x, 720), width=90, height=160).render()
    if not runs:
        break

# =============================================================================
# Measure first, then draw centered and rotated
# =============================================================================
label = TextBox(
    [{"text": "SIDE A", "styles": ["bold"], "size": 20}],
    document=doc,
    at=(72, 400),
    width=200,
    height=40,
    align="center",
    valign="center",
)
label.render(dry_run=True)
print(f"Label needs {label.height:.1f}pt of its 40pt")
label.render()

text_box(doc, "rotated 90°", at=(300, 300), width=120, height=20, rotate=90, rotate_around="center")

pdf.showPage()
pdf.save()
print("✓ Saved to shrink_and_flow.pdf")
