"""Locate OpenAPI documents and name their Swagger 2.0 outputs."""

from pathlib import Path

SPEC_EXTENSIONS = (".json", ".yaml", ".yml")

OUTPUT_SUFFIX = ".swagger.json"


def find_spec_files(folder: Path) -> list[Path]:
    """Recursively find candidate documents under ``folder``.

    Extensions match case-insensitively. Files are grouped by extension
    (.json, then .yaml, then .yml) and sorted by path within each group.
    """
    found: dict[str, list[Path]] = {ext: [] for ext in SPEC_EXTENSIONS}
    for path in folder.rglob("*"):
        ext = path.suffix.lower()
        if ext in found and path.is_file():
            found[ext].append(path)
    return [path for ext in SPEC_EXTENSIONS for path in sorted(found[ext])]


def output_path_for(source: Path, output_folder: Path) -> Path:
    """``petstore.yaml`` -> ``<output_folder>/petstore.swagger.json``."""
    return output_folder / (source.stem + OUTPUT_SUFFIX)
