"""Batch conversion: read, normalize and write each discovered document."""

from enum import IntEnum
from pathlib import Path
from typing import Callable

import click

from openapi_downgrade.config import ConvertOptions
from openapi_downgrade.discovery import find_spec_files, output_path_for
from openapi_downgrade.document.reader import load
from openapi_downgrade.document.writer import SWAGGER_VERSION, write_v2
from openapi_downgrade.transform.normalizer import normalize


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1  # missing source or invalid document
    UNSUPPORTED_SOURCE = 2


class BatchConverter:
    """Converts a file, or every document under a folder, to Swagger 2.0."""

    def __init__(self, options: ConvertOptions, echo: Callable[..., None] = click.echo):
        self.options = options
        self.echo = echo

    def convert_source(self, source: Path) -> int:
        """Convert ``source`` and return the process exit code."""
        if not source.exists():
            self._error(f"ERROR: Specification folder/file '{source}' doesn't exist.")
            return ExitCode.FAILURE

        self.options.output_folder.mkdir(parents=True, exist_ok=True)

        if source.is_file():
            return self.convert_file(source)
        if source.is_dir():
            return self._convert_folder(source)
        return ExitCode.UNSUPPORTED_SOURCE

    def convert_file(self, path: Path) -> int:
        """Convert a single document. Returns 0 on success."""
        self._verbose(f"Reading OpenAPI file '{path}'")
        try:
            with path.open("rb") as stream:
                result = load(stream)
        except OSError as e:
            self._error(f"ERROR: {e}")
            return ExitCode.FAILURE

        if result.diagnostic.errors or result.document is None:
            self._error("ERROR: Not a valid OpenAPI v2 or v3 specification")
            for error in result.diagnostic.errors:
                self._error(str(error))
            return ExitCode.FAILURE

        self._verbose(f"Input OpenAPI version '{result.diagnostic.specification_version}'")

        document = result.document
        normalize(document, self.options.generate_operation_ids, log=self._verbose)

        output_file = output_path_for(path, self.options.output_folder)
        self._verbose(f"Writing output file '{output_file}' as version '{SWAGGER_VERSION}'")
        try:
            with output_file.open("w", encoding="utf-8") as stream:
                write_v2(document, stream)
        except OSError as e:
            self._error(f"ERROR: {e}")
            return ExitCode.FAILURE
        return ExitCode.SUCCESS

    def _convert_folder(self, folder: Path) -> int:
        exit_code = ExitCode.SUCCESS
        for path in find_spec_files(folder):
            code = self.convert_file(path)
            if code == ExitCode.SUCCESS:
                continue
            if not self.options.continue_on_error:
                return code
            exit_code = code
        return exit_code

    def _verbose(self, message: str) -> None:
        if self.options.verbose:
            self.echo(message)

    def _error(self, message: str) -> None:
        self.echo(message, err=True)
