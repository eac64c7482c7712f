"""
Bouldering Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry integration for observability
- Spans and metrics for event dispatch and storage cleanup
"""

from bouldering.infrastructure.telemetry.otel_exporter import (
    OTELExporter,
    OTELConfig,
    create_exporter,
)

__all__ = [
    "OTELExporter",
    "OTELConfig",
    "create_exporter",
]
