# src/spec_factory/ai_pipeline/auditor.py
"""
Audit stage - self-check against the diagrams actually produced.

A failed audit must never leave the packet worse than skipping it: the
fallback is zero issues and the pre-audit spec as the corrected spec.
"""

from __future__ import annotations

from .agents import AuditAgent
from .client import CapabilityClient
from .schemas import GeneratedImage, ProductSpec, SelfCheckResult


async def run_audit(
    client: CapabilityClient,
    spec: ProductSpec,
    images: list[GeneratedImage],
) -> SelfCheckResult:
    try:
        result = await AuditAgent(client).generate(AuditAgent.build_prompt(spec, images))
    except Exception as e:
        print(f"⚠️ [Audit] Self-check unavailable, keeping original spec: {e}")
        return SelfCheckResult(issues=[], corrected_spec=spec)

    print(f"  └─ [Audit] {len(result.issues)} issues found")
    return result
