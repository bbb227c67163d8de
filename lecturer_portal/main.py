"""
Main entry point for the lecturer portal.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .api import DevBackendAPI, RemoteGateway
from .config import PortalConfig, load_config
from .core.enums import AssessmentComponent
from .core.exceptions import LecturerPortalError
from .core.models import GradedRecord
from .core.session import SessionContext
from .core.validation import all_errors, validate_marks
from .reports import BrowserPrintSink, DirectorySink
from .services import AuthCoordinator, MarksCoordinator, ReportingCoordinator, RosterCoordinator


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for command line use."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


class LecturerPortal:
    """Wires the shared session, the gateway and the four coordinators."""

    def __init__(self, config: Optional[PortalConfig] = None):
        self._config = config or PortalConfig()
        self.session = SessionContext()
        self.gateway = RemoteGateway(self._config, self.session)
        self.auth = AuthCoordinator(self.gateway, self.session)
        self.roster = RosterCoordinator(self.gateway)
        self.marks = MarksCoordinator(self.gateway)
        self.reporting = ReportingCoordinator(
            self.gateway,
            sink=DirectorySink(self._config.export_dir),
            print_sink=BrowserPrintSink(self._config.export_dir),
        )
        logger.debug("Lecturer portal ready against %s", self._config.api_base_url)

    @property
    def config(self) -> PortalConfig:
        return self._config

    def close(self) -> None:
        self.gateway.close()

    def __enter__(self) -> "LecturerPortal":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def run_dev_server(host: str = "127.0.0.1", port: int = 3000, log_level: str = "info") -> None:
    """Serve the in-memory development backend until interrupted."""
    import uvicorn

    backend = DevBackendAPI()
    print(f"✓ Development backend on http://{host}:{port}/api")
    print(f"  - API Docs: http://{host}:{port}/docs")
    uvicorn.run(backend.app, host=host, port=port, log_level=log_level)


def _grade_command(args: argparse.Namespace) -> int:
    scores = {component.value: getattr(args, component.value) for component in AssessmentComponent}
    validation = validate_marks({"student_id": "preview", **scores})
    if not validation.is_valid:
        for message in all_errors(validation):
            print(f"✗ {message}", file=sys.stderr)
        return 1

    record = GradedRecord(**scores)
    print(f"Total: {record.total_score:g} / 100")
    print(f"Grade: {record.grade.value}")
    return 0


def _show_config_command(config: PortalConfig) -> int:
    print(json.dumps(config.model_dump(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lecturer Portal grading tools")
    parser.add_argument("--config", type=str, help="Configuration file path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the in-memory development backend")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=3000, help="Port")

    grade = subparsers.add_parser("grade", help="Preview the total and grade for a set of scores")
    for component in AssessmentComponent:
        grade.add_argument(component.value, type=float,
                           help=f"{component.label} score (0-{component.max_marks})")

    subparsers.add_parser("show-config", help="Print the resolved configuration")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except LecturerPortalError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level)

    if args.command == "serve":
        try:
            run_dev_server(args.host, args.port, config.log_level.lower())
        except KeyboardInterrupt:
            print("\nShutting down...")
        return 0
    if args.command == "grade":
        return _grade_command(args)
    return _show_config_command(config)


if __name__ == "__main__":
    sys.exit(main())
