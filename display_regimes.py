#!/usr/bin/env python3
"""
Display the regime configuration of a model file.

Prints the regime dates, the model-to-parameter regime map, the resolved
parameter values per model regime and any configuration warnings.
"""

from dsge_regimes import configure_logging
from dsge_regimes.logging_config import CLI_FORMAT, verbosity_level
from dsge_regimes.parse_yaml import read_yaml
from dsge_regimes.validation import validate_regime_configuration


def display_regimes(model_path, field='value', show_all=False):
    """Load and display the regime configuration of a model."""
    print(f"Loading model from: {model_path}")
    model = read_yaml(model_path)

    print("\n=== Model Details ===")
    print(f"Model Name: {model.name}")
    print(f"Subspec: {model.subspec}")
    print(f"Parameters: {len(model)} ({len(model.estimated_parameters())} estimated entries)")

    print("\n=== Regime Dates ===")
    if not model.n_regimes():
        print("  (single regime, no dates)")
    for r, (start, end) in enumerate(model.regime_dates.regime_ranges(), start=1):
        until = f"until {end.date()}" if end is not None else "onwards"
        print(f"  {r}: {start.date()} {until}")

    print("\n=== Model-to-Parameter Regime Map ===")
    if not len(model.model2para_regime):
        print("  (all parameters regime invariant)")
    for key in model.model2para_regime:
        print(f"  {key}: {model.model2para_regime.get(key)}")

    table = model.parameter_table(field)
    if not show_all:
        varying = table.nunique(axis=1) > 1
        table = table[varying]
    print(f"\n=== Resolved {field} by model regime ===")
    print(table.to_string() if len(table) else "  (no regime-varying parameters)")

    warnings = validate_regime_configuration(model)
    if warnings:
        print("\n=== Warnings ===")
        for w in warnings:
            print(f"  {w}")

    return model


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Display the regime configuration of a model file")
    parser.add_argument("model", help="Path to a model YAML file")
    parser.add_argument("--field", default="value", choices=["value", "fixed", "prior", "bounds"],
                        help="Resolved field to tabulate")
    parser.add_argument("--all", action="store_true", help="Show regime-invariant parameters too")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log subspec setup (-v) or every overlay write (-vv)")
    parser.add_argument("--log-level", help="Logging level by name; overrides -v")
    args = parser.parse_args()

    if args.verbose or args.log_level:
        configure_logging(level=args.log_level or verbosity_level(args.verbose), format_str=CLI_FORMAT)

    display_regimes(args.model, field=args.field, show_all=args.all)
