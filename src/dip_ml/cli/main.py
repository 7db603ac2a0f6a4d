"""
Main CLI entry point for DIP-ML.

Provides subcommands:
  - dip predict-stage: Predict DIP stage (DIP1-3) for a biomarker table
  - dip predict-score: Predict the continuous cDIP score
  - dip show-config: Print the resolved configuration
"""

import sys

import click

from dip_ml import __version__


@click.group()
@click.version_option(version=__version__, prog_name="dip")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v for debug output)",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write log output to this file",
)
@click.pass_context
def cli(ctx, verbose, log_file):
    """
    DIP-ML: Dysregulated Immune Profile inference from plasma biomarkers

    Input tables need the columns ID, TREM_1, IL_6 and Procalcitonin
    (pg/ml, untransformed and unscaled).
    """
    from dip_ml.utils.logging import configure_cli_logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["logger"] = configure_cli_logging(verbose, log_file=log_file)


def _common_options(func):
    func = click.option(
        "--override",
        multiple=True,
        help="Override config values (format: key=value or nested.key=value)",
    )(func)
    func = click.option(
        "--config",
        "-c",
        type=click.Path(exists=True, dir_okay=False),
        help="Path to YAML configuration file",
    )(func)
    return func


def _predict_options(func):
    func = click.option(
        "--outfile",
        "-o",
        type=click.Path(dir_okay=False),
        required=True,
        help="Output table (.csv or .parquet)",
    )(func)
    func = click.option(
        "--infile",
        "-i",
        type=click.Path(exists=True, dir_okay=False),
        required=True,
        help="Input biomarker table (.csv or .parquet)",
    )(func)
    return _common_options(func)


def _run(ctx, kind, infile, outfile, config, override):
    from dip_ml.cli.predict import run_predict
    from dip_ml.exceptions import DIPError

    try:
        run_predict(
            kind=kind,
            infile=infile,
            outfile=outfile,
            config_file=config,
            overrides=list(override),
            logger=ctx.obj["logger"],
        )
    except (DIPError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command("predict-stage")
@_predict_options
@click.pass_context
def predict_stage_cmd(ctx, infile, outfile, config, override):
    """Predict the DIP stage (DIP1 minor, DIP2 moderate, DIP3 major)."""
    _run(ctx, "stage", infile, outfile, config, override)


@cli.command("predict-score")
@_predict_options
@click.pass_context
def predict_score_cmd(ctx, infile, outfile, config, override):
    """Predict the continuous cDIP dysregulation score in [0, 1]."""
    _run(ctx, "score", infile, outfile, config, override)


@cli.command("show-config")
@_common_options
def show_config(config, override):
    """Print the resolved configuration as YAML."""
    import yaml

    from dip_ml.config.loader import config_to_dict, load_inference_config

    try:
        resolved = load_inference_config(config_file=config, overrides=list(override))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(yaml.dump(config_to_dict(resolved), default_flow_style=False, sort_keys=False))


def main():
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
