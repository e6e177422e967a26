# src/spec_factory/ai_pipeline/__init__.py
"""
AI Pipeline Module - model orchestration for design packets.

Handles ONLY model calls and merging. Does NOT handle persistence
(that's librarian) or document rendering (that's export).

Generation Flow:
1. SpecAgent turns the description into a ProductSpec (fatal on failure)
2. Diagram Artist renders the planned views concurrently
3. Code snippet + narrated pitch run concurrently
4. Veo video is polled to completion or timeout
5. AuditAgent checks the spec against the produced diagrams

Status Updates:
- Pass on_status to generate_design_packet()
- Callback receives each GenerationStatus before the stage starts
"""

from .orchestrator import (
    generate_design_packet,
    DesignPipeline,
    GenerateRequest,
    GenerationState,
    SpecGenerationError,
    StatusCallback,
)
from .client import CapabilityClient, InlineMedia
from .fanout import gather_successes
from .schemas import (
    DesignPacket,
    ProductSpec,
    Constraints,
    Part,
    DiagramRequest,
    GeneratedImage,
    GeneratedCode,
    SelfCheckResult,
    GenerationStatus,
    SchemaParseError,
    PRODUCT_TYPES,
    parse_spec,
)
from .video import VideoJobState, VideoPoller

__all__ = [
    # Orchestration
    "generate_design_packet",
    "DesignPipeline",
    "GenerateRequest",
    "GenerationState",
    "SpecGenerationError",
    "StatusCallback",
    # Capabilities
    "CapabilityClient",
    "InlineMedia",
    "gather_successes",
    "VideoJobState",
    "VideoPoller",
    # Schemas
    "DesignPacket",
    "ProductSpec",
    "Constraints",
    "Part",
    "DiagramRequest",
    "GeneratedImage",
    "GeneratedCode",
    "SelfCheckResult",
    "GenerationStatus",
    "SchemaParseError",
    "PRODUCT_TYPES",
    "parse_spec",
]
