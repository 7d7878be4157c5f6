"""Run-wide settings shared by every file in a conversion batch."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ConvertOptions(BaseModel):
    """Options resolved once by the CLI; read-only afterwards."""

    model_config = ConfigDict(frozen=True)

    output_folder: Path
    verbose: bool = False
    generate_operation_ids: bool = False
    continue_on_error: bool = False  # default is to stop at the first failed file
