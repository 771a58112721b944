#!/usr/bin/env python3
"""
Package CLI entrypoint used by the 'ldap-sync-harness' script.
"""

import argparse
import json
import sys

from ldap_sync_harness.config import load_settings
from ldap_sync_harness.exceptions import ConfigError
from ldap_sync_harness.utils.logger import configure, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ldap-sync-harness",
        description="Check that an LDAP group member can deploy to an Artifactory repository",
    )
    p.add_argument("--config", help="Harness INI file (default: $HARNESS_CONFIG or built-in defaults)")
    p.add_argument("--log-level", help="Override [logging] level")
    p.add_argument(
        "--without-permission",
        action="store_true",
        help="Skip the permission grant and expect the upload to be denied",
    )
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        configure()
        logger.error("Invalid harness configuration", event="harness.cli.config_error", error=exc.message)
        return 2

    configure(level=args.log_level or settings.logging.level)
    if args.without_permission:
        settings.scenario.grant_permission = False

    from ldap_sync_harness.scenario import DeployPermissionScenario

    try:
        result = DeployPermissionScenario(settings).run()
    except Exception:
        logger.error("Scenario failed", event="harness.cli.scenario_failed", exc_info=True)
        return 1

    print(json.dumps(result.to_dict(), indent=2), file=sys.stdout)
    return 0 if result.as_expected else 1


if __name__ == "__main__":
    raise SystemExit(main())
