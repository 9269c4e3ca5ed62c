"""
Cut list report

Tabulates packed rolls with pandas and renders the plain-text cut list
shown to the installer.
"""

from typing import List, Optional, Sequence

import pandas as pd

from .models import Roll, VinylLayout
from .packing import roll_totals

CUT_LIST_COLUMNS = ["Roll", "Piece", "Length (m)", "Width (m)", "Area (m²)",
                    "Offset X (m)", "Offset Y (m)"]


def cut_list_frame(rolls: Sequence[Roll]) -> pd.DataFrame:
    """Generate cutting list DataFrame, one row per placed piece"""
    rows = []
    for roll in rolls:
        for piece in roll.pieces:
            rows.append({
                "Roll": roll.roll_number,
                "Piece": piece.name,
                "Length (m)": round(piece.length_m, 2),
                "Width (m)": round(piece.width_m, 2),
                "Area (m²)": round(piece.area, 2),
                "Offset X (m)": round(piece.offset_x_on_roll_m, 2),
                "Offset Y (m)": round(piece.offset_y_on_roll_m, 2),
            })
    return pd.DataFrame(rows, columns=CUT_LIST_COLUMNS)


def generate_cut_list(layout: Optional[VinylLayout], rolls: Sequence[Roll],
                      roll_width_m: float, roll_length_m: float) -> str:
    """Text cut list: summary, material line, then a table per roll"""
    if layout is None:
        return "No layout data available."

    direction = layout.direction.value
    total_length, estimated_rolls = roll_totals(rolls, roll_length_m)

    lines: List[str] = [
        f"Roll Layout Summary ({direction.upper()})",
        "",
        f"Total Rolls Used (estimated): {estimated_rolls}",
        f"Total Material on Rolls: {total_length:.2f} linear meters (approx.)",
        f"Vinyl Width: {roll_width_m:g} m",
        f'Note: "Total Rolls Used" is the number of {roll_length_m:g}m segments started. '
        "Actual material used depends on cuts.",
        "",
        f"# Cut List for {direction.capitalize()} Layout",
        "",
        f"Total Material: {layout.total_material_area:.2f} m² | Waste: {layout.waste:.2f} m² | "
        f"Efficiency: {layout.efficiency:.1f}%",
        "",
    ]

    frame = cut_list_frame(rolls)
    for roll_number, group in frame.groupby("Roll", sort=True):
        lines.append(f"## Roll {roll_number}")
        lines.append("| Piece | Dimensions | Area | Offset (X, Y) |")
        lines.append("|-------|------------|------|--------------|")
        for row in group.itertuples(index=False):
            length, width, area, off_x, off_y = row[2], row[3], row[4], row[5], row[6]
            lines.append(
                f"| {row[1]} | {length:.2f}m x {width:.2f}m | {area:.2f} m² | "
                f"({off_x:.2f}m, {off_y:.2f}m) |"
            )
        lines.append("")

    return "\n".join(lines)
