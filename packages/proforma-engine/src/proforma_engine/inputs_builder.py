"""
Inputs Builder
==============

Canonical logic for preparing an ``AssumptionSet`` from a model preset, an
optional saved snapshot (typically loaded by a snapshot store) and a
user-supplied overrides dictionary.

This module is the **single source of truth** for assumption precedence:

    override > snapshot > preset default

Both ``proforma_service`` and direct engine callers (CLI, notebooks, tests)
should use ``build_assumption_set()`` so a projection is prepared the same
way regardless of call-site.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from .assumptions import AssumptionSet
from .presets import DEFAULTS, get_model

logger = logging.getLogger(__name__)


def build_assumption_set(
    model_name: str,
    snapshot: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> AssumptionSet:
    """
    Merge preset defaults, a saved snapshot and user overrides.

    Parameters
    ----------
    model_name : str
        Name of a registered preset (see ``proforma_engine.presets.MODELS``).
    snapshot : dict, optional
        Previously saved assumption values. Treated as an opaque mapping;
        keys the preset does not know are kept as-is.
    overrides : dict, optional
        Individual field edits. Any key present here wins.

    Returns
    -------
    AssumptionSet
        Coerced, immutable assumption set ready to pass to ``project()``.

    Raises
    ------
    InputError
        If ``model_name`` is not a registered preset.
    """
    get_model(model_name)

    merged: Dict[str, Any] = dict(DEFAULTS[model_name])
    for source in (snapshot, overrides):
        if not source:
            continue
        merged.update(source)

    unknown = sorted(set(merged) - set(DEFAULTS[model_name]))
    if unknown:
        logger.debug(f"Assumptions not used by {model_name}: {unknown}")

    return AssumptionSet(merged)
