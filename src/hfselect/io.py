"""Input/output helpers for JSON inputs, selection config and tabular result export."""

from __future__ import annotations
__author__ = "hfselect developers"


import json
import logging
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

from .bins import PtBinnedCuts
from .errors import ConfigurationError, InputError
from .models import (
    Candidate,
    CandidateEvent,
    DetectorPIDConfig,
    ExclusionRule,
    NSigmaMap,
    PIDConfig,
    SelectionConfig,
    SelectionStatus,
    Track,
    Vector3,
)
from .pid import particle_hypothesis_from_name

logger = logging.getLogger(__name__)

_CANDIDATE_FLOAT_FIELDS = (
    "pt",
    "p",
    "impact_parameter_product",
    "cpa",
    "cpa_xy",
    "decay_length_xy_normalised",
    "impact_parameter_normalised0",
    "impact_parameter_normalised1",
    "decay_length",
    "decay_length_normalised",
)


def load_events_json(path: str | Path) -> list[CandidateEvent]:
    """Load multi-event input JSON into `CandidateEvent` objects.

    Expected shape:
    {
      "events": [
        {"event_id": "...", "tracks": [...], "candidates": [...]},
        ...
      ]
    }
    """
    data = _load_json(path)
    events_data = data.get("events")
    if not isinstance(events_data, list):
        raise InputError("Events JSON must contain a list under key 'events'.")
    out: list[CandidateEvent] = []
    for idx, event in enumerate(events_data):
        if not isinstance(event, dict):
            raise InputError(f"Event entry at index {idx} must be an object.")
        event_id = str(event.get("event_id", f"evt{idx}"))
        out.append(_parse_event(event, event_id=event_id, context=f"event '{event_id}'"))
    logger.info(
        "Loaded %d events with %d candidates from %s",
        len(out),
        sum(len(e.candidates) for e in out),
        path,
    )
    return out


def load_candidates_json(path: str | Path) -> CandidateEvent:
    """Load a single-event document `{"tracks": [...], "candidates": [...]}`."""
    data = _load_json(path)
    event = _parse_event(data, event_id=str(data.get("event_id", "evt0")), context=f"{path}")
    logger.info("Loaded %d candidates from %s", len(event.candidates), path)
    return event


def load_selection_config_json(path: str | Path) -> SelectionConfig:
    """Load a selection configuration JSON and merge it onto the defaults."""
    data = _load_json(path)
    config = selection_config_from_mapping(data)
    logger.info("Loaded selection config from %s (%d pT bins)", path, config.cuts.n_bins)
    return config


def selection_config_from_mapping(data: dict[str, Any]) -> SelectionConfig:
    """Build a `SelectionConfig` from a parsed JSON object.

    Every key is optional; missing keys keep the default value.
    """
    base = SelectionConfig()
    # PID windows are given per detector rather than as one nested "pid" block.
    known = ({f.name for f in fields(SelectionConfig)} - {"pid"}) | {"tpc", "tof", "rich"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown selection config keys: {', '.join(unknown)}")

    try:
        return _build_selection_config(data, base)
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid selection config value: {exc}") from exc


def _build_selection_config(data: dict[str, Any], base: SelectionConfig) -> SelectionConfig:
    pid = PIDConfig(
        tpc=_parse_detector(data.get("tpc"), base.pid.tpc, "tpc"),
        tof=_parse_detector(data.get("tof"), base.pid.tof, "tof"),
        rich=_parse_detector(data.get("rich"), base.pid.rich, "rich"),
    )
    cuts_data = data.get("cuts")
    if cuts_data is None:
        cuts = base.cuts
    elif isinstance(cuts_data, dict):
        cuts = PtBinnedCuts.from_mapping(cuts_data)
    else:
        raise ConfigurationError("Selection config key 'cuts' must be an object.")

    return SelectionConfig(
        pt_cand_min=float(data.get("pt_cand_min", base.pt_cand_min)),
        pt_cand_max=float(data.get("pt_cand_max", base.pt_cand_max)),
        pid=pid,
        electron_rule=_parse_rule(data.get("electron_rule"), base.electron_rule, "electron_rule"),
        pion_kaon_rule=_parse_rule(data.get("pion_kaon_rule"), base.pion_kaon_rule, "pion_kaon_rule"),
        cuts=cuts,
        apply_decay_length_normalised_cut=_parse_flag(
            data.get("apply_decay_length_normalised_cut", base.apply_decay_length_normalised_cut),
            "apply_decay_length_normalised_cut",
        ),
        min_decay_length_normalised=float(
            data.get("min_decay_length_normalised", base.min_decay_length_normalised)
        ),
    )


def write_selection_table(path: str | Path, results: list[SelectionStatus]) -> None:
    """Write selection statuses into Parquet/CSV/Pickle table."""
    pd = _require_pandas()
    df = pd.DataFrame(
        _result_rows(results),
        columns=["event_id", "candidate_id", "status_d0", "status_d0bar", "stage"],
    )
    out = Path(path)
    suffix = out.suffix.lower()
    if suffix == ".parquet":
        df.to_parquet(out, index=False)
    elif suffix in (".pkl", ".pickle"):
        df.to_pickle(out)
    elif suffix == ".csv":
        df.to_csv(out, index=False)
    else:
        raise ValueError(
            f"Unsupported output format '{suffix}'. Use .parquet, .csv, or .pkl"
        )
    logger.info("Wrote %d selection rows to %s", len(df), out)


def _result_rows(results: list[SelectionStatus]) -> list[dict[str, Any]]:
    """Flatten selection statuses into DataFrame-ready row dictionaries."""
    return [
        {
            "event_id": res.event_id,
            "candidate_id": res.candidate_id,
            "status_d0": res.status_d0,
            "status_d0bar": res.status_d0bar,
            "stage": res.stage.value,
        }
        for res in results
    ]


def _require_pandas():
    """Import pandas lazily and provide a clear installation hint on failure."""
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "pandas is required to write output tables. Install pandas and pyarrow."
        ) from exc
    return pd


def _parse_event(data: dict[str, Any], event_id: str, context: str) -> CandidateEvent:
    """Parse the track and candidate containers of one event."""
    tracks_data = data.get("tracks")
    if not isinstance(tracks_data, list):
        raise InputError(f"Payload in {context} must contain a list under key 'tracks'.")
    candidates_data = data.get("candidates")
    if not isinstance(candidates_data, list):
        raise InputError(f"Payload in {context} must contain a list under key 'candidates'.")
    tracks = tuple(
        _parse_track_item(item=item, idx=idx, context=context)
        for idx, item in enumerate(tracks_data)
    )
    candidates = tuple(
        _parse_candidate_item(item=item, idx=idx, context=context)
        for idx, item in enumerate(candidates_data)
    )
    return CandidateEvent(event_id=event_id, candidates=candidates, tracks=tracks)


def _parse_track_item(item: Any, idx: int, context: str) -> Track:
    """Parse one track dictionary into a `Track`."""
    if not isinstance(item, dict):
        raise InputError(f"Track entry at index {idx} in {context} must be an object.")
    nsigma = item.get("nsigma", {})
    if not isinstance(nsigma, dict):
        raise InputError(f"Track field 'nsigma' at index {idx} in {context} must be an object.")
    try:
        return Track(
            track_id=str(item["track_id"]),
            pt=float(item["pt"]),
            impact_parameter=float(item.get("impact_parameter", 0.0)),
            sign=int(item["sign"]),
            tpc_nsigma=_parse_nsigma(nsigma.get("tpc")),
            tof_nsigma=_parse_nsigma(nsigma.get("tof")),
            rich_nsigma=_parse_nsigma(nsigma.get("rich")),
        )
    except InputError:
        raise
    except KeyError as exc:
        raise InputError(
            f"Track at index {idx} in {context} is missing field {exc.args[0]!r}."
        ) from exc
    except (TypeError, ValueError) as exc:
        raise InputError(f"Track at index {idx} in {context} has an invalid value: {exc}") from exc


def _parse_nsigma(value: Any) -> NSigmaMap | None:
    """Parse `{species: nsigma}`; `None` (or absent) means no detector signal."""
    if value is None:
        return None
    if not isinstance(value, dict):
        raise InputError("Detector n-sigma block must be an object or null.")
    out: dict[str, float] = {}
    for name, nsigma in value.items():
        if nsigma is None:
            continue
        out[_species_key(str(name))] = float(nsigma)
    return out


def _species_key(name: str) -> str:
    """Normalise particle aliases (`pion`, `kaon`) to hypothesis names; keep others as given."""
    try:
        return particle_hypothesis_from_name(name).name
    except ValueError:
        return name


def _parse_candidate_item(item: Any, idx: int, context: str) -> Candidate:
    """Parse one candidate dictionary into a `Candidate`."""
    if not isinstance(item, dict):
        raise InputError(f"Candidate entry at index {idx} in {context} must be an object.")
    try:
        values = {name: float(item[name]) for name in _CANDIDATE_FLOAT_FIELDS}
        return Candidate(
            candidate_id=str(item.get("candidate_id", f"cand{idx}")),
            hf_flag=int(item["hf_flag"]),
            prong0_id=str(item["prong0_id"]),
            prong1_id=str(item["prong1_id"]),
            prong0_momentum=_parse_vector3(item["prong0_momentum"]),
            prong1_momentum=_parse_vector3(item["prong1_momentum"]),
            **values,
        )
    except InputError:
        raise
    except KeyError as exc:
        raise InputError(
            f"Candidate at index {idx} in {context} is missing field {exc.args[0]!r}."
        ) from exc
    except (TypeError, ValueError) as exc:
        raise InputError(f"Candidate at index {idx} in {context} has an invalid value: {exc}") from exc


def _parse_vector3(value: Any) -> Vector3:
    """Validate and convert a 3-element list into a momentum tuple."""
    if not isinstance(value, list) or len(value) != 3:
        raise InputError("Prong momentum must be a list of 3 numbers.")
    return (float(value[0]), float(value[1]), float(value[2]))


def _parse_detector(block: Any, default: DetectorPIDConfig, name: str) -> DetectorPIDConfig:
    """Merge a detector block (`pt_min`, `pt_max`, `nsigma`, `nsigma_combined`) onto defaults."""
    if block is None:
        return default
    if not isinstance(block, dict):
        raise ConfigurationError(f"Selection config key '{name}' must be an object.")
    updates: dict[str, float | None] = {}
    if "pt_min" in block:
        updates["pt_min"] = float(block["pt_min"])
    if "pt_max" in block:
        updates["pt_max"] = float(block["pt_max"])
    if "nsigma" in block:
        n = float(block["nsigma"])
        updates["nsigma_min"], updates["nsigma_max"] = -n, n
    if "nsigma_combined" in block:
        if block["nsigma_combined"] is None:
            updates["nsigma_combined_min"] = updates["nsigma_combined_max"] = None
        else:
            n = float(block["nsigma_combined"])
            updates["nsigma_combined_min"], updates["nsigma_combined_max"] = -n, n
    return replace(default, **updates)


def _parse_flag(value: Any, name: str) -> bool:
    """Accept only JSON booleans for on/off switches."""
    if not isinstance(value, bool):
        raise ConfigurationError(f"Selection config key '{name}' must be true or false.")
    return value


def _parse_rule(block: Any, default: ExclusionRule, name: str) -> ExclusionRule:
    """Merge an exclusion-rule block onto defaults."""
    if block is None:
        return default
    if not isinstance(block, dict):
        raise ConfigurationError(f"Selection config key '{name}' must be an object.")
    allowed = {f.name for f in fields(ExclusionRule)}
    unknown = sorted(set(block) - allowed)
    if unknown:
        raise ConfigurationError(f"Unknown keys in '{name}': {', '.join(unknown)}")
    return replace(default, **{k: float(v) for k, v in block.items()})


def _load_json(path: str | Path) -> dict[str, Any]:
    """Read and validate a JSON object document from disk."""
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise InputError(f"JSON document at {path} must be an object.")
    return data
