"""Command line interface for the project.

Commands:
- show-settings: prints the resolved Settings
- run: Bag of Little Bootstraps over a CSV file or a directory of partitions
- simulate: BLB over a synthetic bivariate-normal population with known ρ
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Iterable

import numpy as np

from blb_quant.config import (
    BLBConfig,
    ConfigError,
    Settings,
    configure_logging,
    get_settings,
    load_config,
)
from blb_quant.config.schemas import DataSourceConfig
from blb_quant.evaluation.stats.aggregate import AggregationError

__all__ = ["build_parser", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="blb_quant CLI")
    parser.add_argument(
        "--structured-logs",
        dest="structured_logs",
        action="store_true",
        help="força logs estruturados em JSON",
    )
    parser.add_argument(
        "--plain-logs",
        dest="structured_logs",
        action="store_false",
        help="força logs texto simples",
    )
    parser.set_defaults(structured_logs=None)

    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show-settings", help="Exibe as Settings resolvidas")
    show.add_argument("--json", action="store_true", help="Formato JSON")

    run = subparsers.add_parser("run", help="Executa o BLB sobre dados em CSV")
    run.add_argument("--config", type=str, help="Arquivo de configuração YAML")
    run.add_argument(
        "--data",
        type=str,
        default=None,
        help="CSV único ou diretório de partições (sobrescreve data.path do YAML)",
    )
    run.add_argument("--x-col", default=None, help="Coluna x (default: x)")
    run.add_argument("--y-col", default=None, help="Coluna y (default: y)")
    run.add_argument("--workers", type=int, default=None, help="Tamanho do pool")
    run.add_argument("--seed", type=int, default=None, help="Seed (default: Settings)")
    run.add_argument("--json", action="store_true", help="Mostra resultado em JSON")
    run.add_argument(
        "--per-subsample",
        action="store_true",
        help="Imprime a tabela de resumos por subamostra",
    )

    sim = subparsers.add_parser(
        "simulate", help="BLB sobre população normal bivariada sintética"
    )
    sim.add_argument("--rows", type=int, default=1000, help="Tamanho da população N")
    sim.add_argument("--rho", type=float, default=0.6, help="Correlação verdadeira")
    sim.add_argument("-s", "--subsamples", type=int, default=20, help="Subamostras s")
    sim.add_argument("-b", "--subsample-size", type=int, default=200, help="Linhas b")
    sim.add_argument("-r", "--replicates", type=int, default=200, help="Réplicas r")
    sim.add_argument("--workers", type=int, default=None, help="Tamanho do pool")
    sim.add_argument("--seed", type=int, default=None, help="Seed (default: Settings)")
    sim.add_argument("--json", action="store_true", help="Mostra resultado em JSON")

    return parser


def _configure_logging(
    structured: bool | None, settings: Settings, command: str
) -> None:
    configure_logging(
        settings=settings, structured=structured, context={"command": command}
    )


def _print_payload(payload: dict[str, Any], *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2, sort_keys=True, default=str))
    else:
        for key, value in payload.items():
            print(f"{key}: {value}")


def _build_run_config(args: argparse.Namespace, settings: Settings) -> BLBConfig:
    config = (
        load_config(args.config, project_root=settings.project_root)
        if args.config
        else BLBConfig()
    )

    data = config.data
    if args.data is not None:
        data = DataSourceConfig(
            path=args.data,
            x_column=args.x_col or (data.x_column if data else "x"),
            y_column=args.y_col or (data.y_column if data else "y"),
        )
    elif data is not None and (args.x_col or args.y_col):
        data = data.model_copy(
            update={
                "x_column": args.x_col or data.x_column,
                "y_column": args.y_col or data.y_column,
            }
        )
    if data is None:
        raise FileNotFoundError("Nenhum dado informado: use --data ou data.path no YAML")

    run_updates: dict[str, Any] = {}
    if args.workers is not None:
        run_updates["workers"] = args.workers
    if args.seed is not None:
        run_updates["seed"] = args.seed
    elif config.run.seed is None:
        run_updates["seed"] = settings.random_seed
    run = config.run.model_copy(update=run_updates)
    return BLBConfig(run=run, data=data)


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    settings = get_settings()
    _configure_logging(args.structured_logs, settings, args.command)

    try:
        if args.command == "show-settings":
            _print_payload(settings.to_dict(), as_json=args.json)

        elif args.command == "run":
            from blb_quant.pipeline import run_from_config

            config = _build_run_config(args, settings)
            estimate = run_from_config(config)
            _print_payload(estimate.to_dict(), as_json=args.json)
            if args.per_subsample:
                print(estimate.to_frame().to_string())

        elif args.command == "simulate":
            from blb_quant.data.synthetic import simulate_bivariate_normal
            from blb_quant.pipeline import run_blb
            from blb_quant.utils.seed import rng_factory

            seed = settings.random_seed if args.seed is None else args.seed
            population = simulate_bivariate_normal(args.rows, args.rho, rng_factory(seed))
            estimate = run_blb(
                population,
                n_subsamples=args.subsamples,
                subsample_size=min(args.subsample_size, args.rows),
                resample_size=args.rows,
                n_replicates=args.replicates,
                worker_count=args.workers or settings.worker_count,
                backend=settings.parallel_backend,
                random_seed=seed,
            )
            payload = estimate.to_dict()
            payload["true_rho"] = args.rho
            payload["sample_rho"] = float(np.corrcoef(population.x, population.y)[0, 1])
            payload["covers_true_rho"] = estimate.contains(args.rho)
            _print_payload(payload, as_json=args.json)

        else:  # pragma: no cover - argparse already rejects unknown commands
            parser.error(f"Unknown command: {args.command}")

    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except (AggregationError, ConfigError, ValueError) as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
