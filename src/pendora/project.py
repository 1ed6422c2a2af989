from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union

from .errors import DuplicateDeclaration, FieldNotExistent, ParseError, ProjectFile
from .lexer_rd import tokenize
from .parser_rd import parse_declaration
from .types import Declaration, Global, Method, Object, Project, frozen

logger = logging.getLogger(__name__)

SOURCE_EXTENSION = ".pendora"

Source = Tuple[str, str]  # (file name, text)


def iter_source_files(root: Union[str, Path], extension: str = SOURCE_EXTENSION) -> Iterator[Path]:
    """Yield declaration files under `root`, sorted by path."""
    root = Path(root)
    for path in sorted(root.rglob(f"*{extension}")):
        if path.is_file():
            yield path


def parse_source(text: str, file_name: str = "<source>") -> Declaration:
    """
    Parse one declaration file.

    Lexer and parser failures keep their own syntactic location and gain the
    file name.
    """
    try:
        return parse_declaration(tokenize(text), file_name)
    except ParseError as err:
        if err.file_name is None:
            err.file_name = file_name
        raise


def assemble(sources: Iterable[Source], project_name: str = "<project>") -> Project:
    """Fold parsed declaration files into one project."""
    global_: Optional[Global] = None
    global_file = ""
    objects: Dict[str, Object] = {}
    methods: Dict[str, Method] = {}

    for file_name, text in sources:
        logger.debug("parsing %s", file_name)
        decl = parse_source(text, file_name)

        if isinstance(decl, Global):
            if global_ is not None:
                raise ParseError(
                    DuplicateDeclaration(ProjectFile(file_name), "Global", decl.name),
                    file_name=file_name,
                )
            global_, global_file = decl, file_name
        elif isinstance(decl, Object):
            if decl.name in objects:
                logger.warning("%s: Object %s redeclared, replacing earlier declaration", file_name, decl.name)
            objects[decl.name] = decl
        else:
            if decl.name in methods:
                logger.warning("%s: Method %s redeclared, replacing earlier declaration", file_name, decl.name)
            methods[decl.name] = decl

    if global_ is None:
        raise ParseError(FieldNotExistent(ProjectFile(project_name), "global"))

    logger.debug(
        "assembled project %s from %s: %d objects, %d methods",
        global_.name, global_file, len(objects), len(methods),
    )
    return Project(global_=global_, objects=frozen(objects), methods=frozen(methods))


def _read_sources(paths: Iterable[Path], root: Path) -> Iterator[Source]:
    for path in paths:
        yield str(path.relative_to(root)), path.read_text(encoding="utf-8")


def parse_project(root: Union[str, Path], extension: str = SOURCE_EXTENSION) -> Project:
    """Parse every declaration file under `root` into a project."""
    root = Path(root)
    return assemble(_read_sources(iter_source_files(root, extension), root), str(root))
