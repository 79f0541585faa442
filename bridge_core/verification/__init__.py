# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Evidence collection, normalization, reachability verification and the
evidence gate.
"""

from bridge_core.verification.collector import EvidenceCollection, EvidenceCollector
from bridge_core.verification.evidence_normalizer import normalize_evidence
from bridge_core.verification.gate import (
    EvidenceGateResult,
    QualityAssessment,
    assess_enrichment_quality,
    evaluate_evidence_gate,
)
from bridge_core.verification.verifier import EvidenceVerifier

__all__ = [
    "EvidenceCollection",
    "EvidenceCollector",
    "EvidenceGateResult",
    "EvidenceVerifier",
    "QualityAssessment",
    "assess_enrichment_quality",
    "evaluate_evidence_gate",
    "normalize_evidence",
]
