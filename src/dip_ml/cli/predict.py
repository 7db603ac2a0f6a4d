"""CLI implementation for the predict-stage and predict-score commands."""

import logging
from pathlib import Path
from typing import Literal

from dip_ml.config.loader import load_inference_config
from dip_ml.data.io import read_biomarker_file, write_table
from dip_ml.evaluation.predict import predict_score, predict_stage
from dip_ml.utils.logging import log_section
from dip_ml.utils.serialization import save_json


def exclusions_path_for(outfile: str | Path) -> Path:
    """Sidecar path for the exclusion report, e.g. out.csv -> out.excluded.json."""
    outfile = Path(outfile)
    return outfile.with_name(f"{outfile.stem}.excluded.json")


def run_predict(
    kind: Literal["stage", "score"],
    infile: str,
    outfile: str,
    config_file: str | None = None,
    overrides: list[str] | None = None,
    logger: logging.Logger | None = None,
):
    """
    Read a biomarker table, predict, and write the result table.

    Args:
        kind: "stage" (DIP1-3) or "score" (cDIP)
        infile: Input CSV/Parquet
        outfile: Output CSV/Parquet
        config_file: Optional YAML config
        overrides: Optional "key=value" overrides
        logger: Logger to report to (default: module logger)

    Returns:
        StageResult or ScoreResult
    """
    logger = logger or logging.getLogger(__name__)
    title = "DIP stage prediction" if kind == "stage" else "cDIP score prediction"
    log_section(
        logger,
        title,
        details={"Input": infile, "Output": outfile, "Config": config_file or "defaults"},
    )

    config = load_inference_config(config_file=config_file, overrides=overrides)
    df = read_biomarker_file(infile)

    if kind == "stage":
        result = predict_stage(df, config=config)
    elif kind == "score":
        result = predict_score(df, config=config)
    else:
        raise ValueError(f"Unknown prediction kind: {kind!r}")

    write_table(result.table, outfile)

    sidecar = exclusions_path_for(outfile)
    if len(result.exclusions):
        save_json(result.exclusions.to_dict(), sidecar)
        logger.info(f"Excluded IDs written to: {sidecar}")
    elif sidecar.exists():
        # Stale report from an earlier run on the same outfile
        sidecar.unlink()

    if kind == "stage":
        for _, row in result.distribution.iterrows():
            logger.info(f"  {row['fill_label']}: {row['Freq']} record(s)")

    logger.info(f"Results saved to: {outfile}")
    return result
