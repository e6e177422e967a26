# src/spec_factory/cli.py
"""
Command-line entry point.

    spec-factory "a wearable wrist device that vibrates near obstacles" --type physical

Runs the full pipeline, stores the result as a recent design and writes
the HTML design packet.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from .ai_pipeline import PRODUCT_TYPES, GenerationStatus, SpecGenerationError, generate_design_packet
from .config import FactorySettings
from .export import export_filename, render_packet_html
from .librarian import build_recent_record, create_librarian

STATUS_LABELS = {
    GenerationStatus.SPECIFICATION: "Drafting specifications...",
    GenerationStatus.DIAGRAMS: "Rendering blueprints...",
    GenerationStatus.AUXILIARY: "Writing firmware & pitch...",
    GenerationStatus.VIDEO: "Filming product commercial (Veo)...",
    GenerationStatus.AUDIT: "Verifying integrity...",
    GenerationStatus.COMPLETE: "Design packet ready.",
    GenerationStatus.ERROR: "Factory halted.",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a design packet from a product description")
    parser.add_argument("description", help="Free-text product description")
    parser.add_argument("--type", dest="product_type", choices=PRODUCT_TYPES, default="physical", help="Product category")
    parser.add_argument("--out", type=Path, default=Path("."), help="Directory for the HTML packet")
    parser.add_argument("--no-save", action="store_true", help="Do not store the design in the recent library")
    return parser


async def run(args: argparse.Namespace) -> int:
    try:
        settings = FactorySettings.from_env()
    except RuntimeError as e:
        print(f"[!] {e}")
        return 2

    def on_status(status: GenerationStatus) -> None:
        print(f"[*] {STATUS_LABELS[status]}")

    try:
        packet = await generate_design_packet(
            args.description,
            args.product_type,
            on_status=on_status,
            settings=settings,
        )
    except SpecGenerationError as e:
        print(f"[!] {e}")
        return 1

    if not args.no_save:
        librarian = create_librarian(settings)
        try:
            record = build_recent_record(packet)
            await librarian.put(record)
            print(f"[+] Saved recent design {record.id} ({record.product_name})")
        finally:
            await librarian.close_connections()

    args.out.mkdir(parents=True, exist_ok=True)
    out_path = args.out / export_filename(packet)
    out_path.write_bytes(render_packet_html(packet))
    print(f"[+] Design packet written to {out_path}")

    if packet.self_check.issues:
        print(f"[*] Audit raised {len(packet.self_check.issues)} issues:")
        for issue in packet.self_check.issues:
            print(f"    - {issue}")
    return 0


def main() -> None:
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
