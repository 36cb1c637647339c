"""Render nodes and files back to Go source, and persist them."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from .errors import FormatError
from .model import File, Module, Package
from .nodes import Node

logger = logging.getLogger(__name__)


def render_node(node: Node) -> str:
    """Doc comment plus declaration text of *node*."""
    text = node.text
    if not node.doc:
        return text
    comment = "\n".join(f"// {line}" if line else "//" for line in node.doc.split("\n"))
    return f"{comment}\n{text}"


def format_file(file: File, gofmt: bool = False) -> str:
    """Source text of *file*, optionally normalised by ``gofmt``."""
    try:
        text = file.src.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"{file.filename}: {exc}") from exc
    if gofmt:
        return run_gofmt(text, file.filename)
    lines = [ln.rstrip() for ln in text.replace("\r\n", "\n").split("\n")]
    return "\n".join(lines).rstrip("\n") + "\n"


def run_gofmt(text: str, filename: str = "<input>") -> str:
    exe = shutil.which("gofmt")
    if exe is None:
        raise FormatError("gofmt not found on PATH")
    result = subprocess.run([exe], input=text, capture_output=True, text=True, check=False)
    if result.returncode != 0:
        raise FormatError(f"{filename}: {result.stderr.strip()}")
    return result.stdout


def format_package(package: Package, gofmt: bool = False) -> Dict[str, str]:
    """Map of file path to rendered text, in filename order."""
    return {
        filename: format_file(package.files[filename], gofmt=gofmt)
        for filename in sorted(package.files)
    }


def format_module(module: Module, gofmt: bool = False) -> Dict[str, str]:
    codes: Dict[str, str] = {}
    for name in sorted(module.packages):
        codes.update(format_package(module.packages[name], gofmt=gofmt))
    return codes


def write_file(path: Union[str, Path], text: str) -> Path:
    path = Path(path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def store(codes: Mapping[str, str]) -> List[Path]:
    """Write every entry in order. The first failure propagates.

    Files written before the failure are left in place; the rest of the
    batch is not attempted.
    """
    written: List[Path] = []
    for path, text in codes.items():
        written.append(write_file(path, text))
        logger.debug("Wrote %s", written[-1])
    return written


def store_module(
    module: Module,
    out_dir: Optional[Union[str, Path]] = None,
    gofmt: bool = False,
) -> List[Path]:
    """Format the whole module, then write it (under *out_dir* if given)."""
    codes = format_module(module, gofmt=gofmt)
    if out_dir is not None:
        out = Path(out_dir)
        codes = {str(out / Path(path).name): text for path, text in codes.items()}
    return store(codes)
