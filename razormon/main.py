#!/usr/bin/env python3
"""
Main control script for the razor trigger efficiency monitor

This script:
1. Loads the monitor configuration (TOML, defaults if none given)
2. Books the razor histograms (M_R, R^2, dPhi_R, M_R vs R^2)
3. Runs the monitor over all events of the input ROOT files
4. Saves the histograms into a ROOT file
5. Writes efficiency tables (and optionally plots)

Usage:
    # Run with default configuration
    razormon events.root

    # Custom configuration and output directory
    razormon events_*.root --config razor.toml --output-dir results/razor

    # Also produce efficiency plots
    razormon events.root --plots
"""

import argparse
import sys
from pathlib import Path

from .event_source import EventSource
from .modules.config import MonitorConfig
from .modules.efficiency_calculator import EfficiencyCalculator
from .modules.exceptions import RazorMonitorError
from .modules.histograms import HistogramStore
from .modules.razor_monitor import RazorMonitor
from .utils.logging_config import setup_logging, suppress_warnings


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Razor trigger efficiency monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Without --config the standard offline configuration is used:
  - Folder: HLT/SUSY/Razor
  - Inputs: pfMet, ak4PFJetsCHS, hemispheresDQM
  - At least 2 jets with pt > 80, M_R > 300 or R^2 > 0.15
  - No trigger requirements (numerator and denominator always accept)
        """
    )

    parser.add_argument(
        "inputs",
        nargs="+",
        help="Input ROOT files with an Events tree"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Monitor configuration TOML file (default: built-in configuration)"
    )

    parser.add_argument(
        "--output-dir",
        default="output",
        help="Output directory (default: output)"
    )

    parser.add_argument(
        "--tree",
        default="Events",
        help="Name of the event tree (default: Events)"
    )

    parser.add_argument(
        "--plots",
        action="store_true",
        help="Produce efficiency plots"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def run_monitor(inputs, config, output_dir, tree_name="Events", make_plots=False):
    """
    Run the monitor over the inputs and write all outputs

    Returns:
        (monitor, store) after processing
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    source = EventSource(inputs, config, tree_name=tree_name)
    store = HistogramStore()
    monitor = RazorMonitor(config)
    monitor.book_histograms(store.booker(), source.run())

    for event in source:
        monitor.analyze(event)

    monitor.report_cutflow()
    store.save(output_dir / "histograms.root")

    calculator = EfficiencyCalculator()
    tables = calculator.summarize(monitor)
    calculator.save_tables(tables, output_dir / "tables")

    if make_plots:
        from .plotter import EfficiencyPlotter
        EfficiencyPlotter(output_dir / "plots").plot_all(monitor)

    return monitor, store


def main(argv=None):
    """Main function"""
    args = parse_args(argv)
    logger = setup_logging(args.verbose)
    suppress_warnings()

    try:
        config = MonitorConfig.from_toml(args.config) if args.config else MonitorConfig()
        logger.info(f"Configuration: {config}")
        run_monitor(args.inputs, config, args.output_dir, args.tree, args.plots)
    except RazorMonitorError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Done. Outputs in {args.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
