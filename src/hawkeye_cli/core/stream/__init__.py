"""Investigation stream reassembly.

This package turns the live, fragment-by-fragment investigation stream into
ordered display blocks:
- models: InputFragment / OutputBlock vocabulary and payload decoding
- processor: StreamProcessor, the buffering and block-sequencing engine
- bridge: StreamingBridge, background reader + single foreground consumer
"""

from hawkeye_cli.core.stream.bridge import DEFAULT_QUEUE_SIZE, StreamingBridge
from hawkeye_cli.core.stream.models import (
    BlockKind,
    DeltaKind,
    FragmentCategory,
    InputFragment,
    OutputBlock,
    ReasoningPayload,
    SourcePayload,
    parse_source_label,
)
from hawkeye_cli.core.stream.processor import ProcessorState, StreamProcessor

__all__ = [
    "DEFAULT_QUEUE_SIZE",
    "BlockKind",
    "DeltaKind",
    "FragmentCategory",
    "InputFragment",
    "OutputBlock",
    "ProcessorState",
    "ReasoningPayload",
    "SourcePayload",
    "StreamProcessor",
    "StreamingBridge",
    "parse_source_label",
]
