# src/spec_factory/ai_pipeline/diagram_artist.py
"""
Diagram Artist - technical blueprint rendering

Renders each planned diagram of a spec with Gemini Nano Banana Pro
(gemini-3-pro-image-preview). One request per plan entry, all in flight
at once. Entries that fail or return no image are omitted, never replaced
with a placeholder.
"""

from __future__ import annotations

import base64

from .client import CapabilityClient
from .fanout import gather_successes
from .schemas import DiagramRequest, GeneratedImage


# Blueprint look shared by every view
STYLE_DIRECTIVE = "Technical engineering drawing, blueprint style"
QUALITY_DIRECTIVES = "High contrast, white background, schematic labels, technical illustration."


def build_diagram_prompt(plan: DiagramRequest) -> str:
    """Style directive + view type + title + model-facing description + quality directives."""
    return (
        f"{STYLE_DIRECTIVE}, {plan.diagram_type} view of {plan.title}. "
        f"{plan.description_for_image_model}. {QUALITY_DIRECTIVES}"
    )


def to_data_url(mime_type: str, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


async def render_diagram(client: CapabilityClient, plan: DiagramRequest) -> GeneratedImage | None:
    """
    Render one diagram.

    Returns None when the response carries no image part. Request errors
    propagate to the fan-out, which drops the item.
    """
    prompt = build_diagram_prompt(plan)
    media = await client.generate_image(prompt)

    if media is None:
        print(f"⚠️ [Diagrams] No image data for '{plan.title}'")
        return None

    print(f"  └─ [Diagrams] Rendered '{plan.title}' ({len(media.data)} bytes)")
    return GeneratedImage(
        diagram_type=plan.diagram_type,
        title=plan.title,
        url=to_data_url(media.mime_type, media.data),
        prompt_used=prompt,
    )


async def generate_diagrams(
    client: CapabilityClient,
    plans: list[DiagramRequest],
) -> list[GeneratedImage]:
    """Render every titled plan entry concurrently and keep whatever succeeds."""
    titled = [plan for plan in plans if plan is not None and plan.title and plan.title.strip()]
    skipped = len(plans) - len(titled)
    if skipped:
        print(f"⚠️ [Diagrams] Skipping {skipped} plan entries without a title")

    print(f"🎨 [Diagrams] Rendering {len(titled)} diagrams...")
    images = await gather_successes(
        titled,
        lambda plan: render_diagram(client, plan),
        label="Diagrams",
        describe=lambda plan: f"'{plan.title}'",
    )
    print(f"✅ [Diagrams] {len(images)}/{len(titled)} diagrams rendered")
    return images
