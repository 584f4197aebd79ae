"""
Command-line interface for fitting the BAO scale in 3D Lyman-alpha correlations.

Examples::

    # Fit using the default binning
    baofit --data xi3d --fiducial templates/fid --nowiggles templates/nw

    # Read settings from a file and dump residuals and the model grid
    baofit --config fit.yaml --dump fit.dat
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.base.exceptions import BaoFitError, ConfigurationError
from .core.config.settings import FitConfig, load_config_from_env
from .core.cosmology import LambdaCdmDistances
from .core.likelihood import Likelihood
from .core.minimizer import MinuitFitter
from .core.model import BaoCorrelationModel
from .file_io.readers import load_dataset
from .utils.logging_utils import setup_logging, PerformanceMonitor

logger = logging.getLogger(__name__)

# (option dest prefix, config attribute)
BINNING_OPTIONS = (
    ("ll", "log_lambda"),
    ("sep", "separation"),
    ("z", "redshift"),
)


class FitCLI:
    """Command-line front end running one complete fit."""

    def __init__(self):
        self.performance_monitor = PerformanceMonitor()

    def create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="BAO fitting",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=__doc__.split("Examples::", 1)[1],
        )
        parser.add_argument("--config", "-c", type=Path,
                            help="Configuration file (YAML/JSON)")
        parser.add_argument("--verbose", action="store_true",
                            help="Prints additional information.")
        parser.add_argument("--omega-lambda", type=float,
                            help="Present-day value of OmegaLambda (default: 0.734).")
        parser.add_argument("--omega-matter", type=float,
                            help="Present-day value of OmegaMatter or zero for 1-OmegaLambda "
                                 "(default: 0.266).")
        parser.add_argument("--fiducial",
                            help="Fiducial correlation functions are read from <name>.<ell>.dat "
                                 "with ell=0,2,4.")
        parser.add_argument("--nowiggles",
                            help="No-wiggles correlation functions are read from <name>.<ell>.dat "
                                 "with ell=0,2,4.")
        parser.add_argument("--zref", type=float, help="Reference redshift (default: 2.25).")
        parser.add_argument("--data",
                            help="3D covariance data is read from <data>.params and <data>.cov")
        parser.add_argument("--minll", type=float, help="Minimum log(lam2/lam1).")
        parser.add_argument("--dll", type=float, help="log(lam2/lam1) binsize.")
        parser.add_argument("--nll", type=int, help="Maximum number of log(lam2/lam1) bins.")
        parser.add_argument("--minsep", type=float, help="Minimum separation in arcmins.")
        parser.add_argument("--dsep", type=float, help="Separation binsize in arcmins.")
        parser.add_argument("--nsep", type=int, help="Maximum number of separation bins.")
        parser.add_argument("--minz", type=float, help="Minimum redshift.")
        parser.add_argument("--dz", type=float, help="Redshift binsize.")
        parser.add_argument("--nz", type=int, help="Maximum number of redshift bins.")
        parser.add_argument("--dump", type=Path, help="Filename for dumping fit results.")
        parser.add_argument("--oversampling", type=int,
                            help="Model oversampling factor used for the dump (default: 10).")
        parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                            help="Logging level (default: INFO)")
        parser.add_argument("--log-file", type=Path, help="Log to file in addition to console")
        return parser

    def _load_config(self, args: argparse.Namespace) -> FitConfig:
        """Build the configuration: file, then environment, then command line."""
        config = FitConfig.from_file(args.config) if args.config else FitConfig()
        config = load_config_from_env(config)

        updates = {}
        for option, attr in (("omega_lambda", "omega_lambda"), ("omega_matter", "omega_matter"),
                             ("fiducial", "fiducial"), ("nowiggles", "nowiggles"),
                             ("zref", "zref"), ("data", "data"), ("dump", "dump"),
                             ("oversampling", "oversampling"), ("log_level", "log_level"),
                             ("log_file", "log_file")):
            value = getattr(args, option)
            if value is not None:
                updates[attr] = value

        for prefix, attr in BINNING_OPTIONS:
            current = getattr(config, attr)
            n, low, width = (getattr(args, "n" + prefix), getattr(args, "min" + prefix),
                             getattr(args, "d" + prefix))
            if n is not None or low is not None or width is not None:
                updates[attr] = (
                    current.count if n is None else n,
                    current.low_edge if low is None else low,
                    current.bin_width if width is None else width,
                )

        if args.verbose and args.log_level is None:
            updates["log_level"] = "DEBUG"

        if updates:
            config.update(**updates)
        return config

    def run(self, config: FitConfig) -> int:
        """Load inputs, run the fit and optionally dump the results."""
        config.require_inputs()

        with self.performance_monitor.timer("initialization"):
            cosmology = LambdaCdmDistances(config.omega_lambda, config.omega_matter)
            model = BaoCorrelationModel.from_files(config.fiducial, config.nowiggles, config.zref)
            logger.info("Cosmology initialized.")

        with self.performance_monitor.timer("data loading"):
            data = load_dataset(config.data, config.binnings(), cosmology)

        likelihood = Likelihood(data, model)
        fitter = MinuitFitter(likelihood, strategy=config.strategy, tolerance=config.tolerance,
                              max_calls=config.max_calls)
        with self.performance_monitor.timer("fit"):
            result = fitter.fit()

        logger.info(f"Covariance:\n{result.covariance}")
        logger.info(f"Global correlation coefficients: {dict(zip(result.parameter_names, result.global_correlation))}")

        if config.dump is not None:
            logger.info(f"Dumping fit results to {config.dump}")
            with self.performance_monitor.timer("dump"):
                likelihood.dump(config.dump, result.values, config.oversampling)

        self.performance_monitor.log_summary()
        return 0

    def main(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point returning a process exit code."""
        parser = self.create_parser()
        args = parser.parse_args(argv)

        setup_logging(args.log_level or ("DEBUG" if args.verbose else "INFO"), args.log_file)

        try:
            config = self._load_config(args)
            setup_logging(config.log_level, config.log_file)
            return self.run(config)
        except ConfigurationError as e:
            logger.error(f"{e}")
            return 1
        except BaoFitError as e:
            logger.error(f"Fit failed: {e}")
            return 2
        except KeyboardInterrupt:
            logger.info("Fit interrupted by user")
            return 130


def main():
    """Entry point for command line usage."""
    cli = FitCLI()
    sys.exit(cli.main())


if __name__ == "__main__":
    main()
