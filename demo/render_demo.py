#!/usr/bin/env python3
from __future__ import annotations

from pathlib import Path

from pagewright.config import build_font_table, load_app_config
from pagewright.core.models import (
    BulletList,
    ContentDocument,
    EmbeddedBlock,
    EmbeddedField,
    GridBox,
    Heading,
    KeyValueGrid,
    Paragraph,
    Table,
    TableColumn,
)
from pagewright.layout.paginate import Paginator
from pagewright.render.pdf_render import render_pdf


def _notes(count: int) -> str:
    line = "Follow-up call covered pricing, rollout dates and the security review."
    return "\n".join(f"{index + 1}. {line}" for index in range(count))


def build_document() -> ContentDocument:
    return ContentDocument(
        title="Acme Corp renewal review",
        subtitle_lines=("Prepared for the account team", "Quarter 3"),
        sections=(
            Heading("Account overview"),
            KeyValueGrid(
                boxes=(
                    GridBox(label="Owner", fragments=("Dana Whitfield",), accent="blue"),
                    GridBox(label="Stage", fragments=("Negotiation",), accent="orange"),
                    GridBox(label="Risks", items=("Budget freeze", "New procurement lead")),
                    GridBox(label="Next step", fragments=("Send revised quote",)),
                    GridBox(label="Value", fragments=("$84,000 ARR",), accent="green"),
                ),
                columns=3,
            ),
            Paragraph(_notes(60), label="Call notes"),
            BulletList(
                ("Confirm seat count", "Share SOC 2 report", "Book executive sync"),
                label="Action items",
                columns=2,
            ),
            Table(
                columns=(TableColumn("Opportunity"), TableColumn("Amount", width_mm=35.0)),
                rows=tuple(
                    (f"Expansion {index + 1}", f"${(index + 1) * 1200:,}") for index in range(45)
                ),
                label="Pipeline",
            ),
            EmbeddedBlock(
                label="Draft email",
                fields=(
                    EmbeddedField("Renewal proposal for Q3", label="Subject"),
                    EmbeddedField("Hi Dana,\n\nAttached is the revised quote we discussed."),
                ),
            ),
        ),
    )


def main(config_path: str | Path | None = None, paper_size: str | None = None) -> None:
    config = load_app_config(config_path, paper_size=paper_size)
    fonts = build_font_table(config)
    result = Paginator(config.layout, fonts).paginate(build_document())
    output = render_pdf(result, config.layout, fonts, Path("render_demo.pdf"))
    print(f"Wrote {output} ({result.page_count} pages)")


if __name__ == "__main__":
    main()
