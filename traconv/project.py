#!/usr/bin/env python3
"""
Project manifest and whole-tree conversion.

A mod source tree keeps one directory of .tra files per language:

    <source>/iwd2ee/tra/English/setup.tra
    <source>/iwd2ee/tra/Russian/setup.tra   (cp1251)

The manifest says which language directories and files to convert and
which encoding each language uses. Output goes to
``<output>/<language code>/<file>.json``.

Manifest (YAML):
```yaml
tra_root: iwd2ee/tra
output_root: l10n
languages:
  - directory: English
    code: en
  - directory: Russian
    code: ru
    encoding: win1251
files:
  - setup.tra
  - misc.tra
```
"""

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Iterator, Optional

import yaml

from .converter import tra_to_json
from .errors import ConfigError, ConversionError, SourceNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class LanguageSpec:
    """One language directory in the source tree."""
    directory: str
    code: str
    encoding: str = "utf-8"


DEFAULT_LANGUAGES = [
    LanguageSpec("English", "en"),
    LanguageSpec("Italian", "it"),
    LanguageSpec("Russian", "ru", "win1251"),
]

DEFAULT_FILES = [
    "setup.tra",
    "class_revisions.tra",
    "loose_alignment.tra",
    "spell_revise.tra",
    "spell_focus.tra",
    "item_revisions.tra",
    "creature_rebalancing.tra",
    "faster_areas.tra",
    "z_concoct_potions.tra",
    "npc_core.tra",
    "revised_battle_square.tra",
    "lua.tra",
    "racial_enemies.tra",
    "misc.tra",
    "more_persuasion_options.tra",
    "new_strings_after_release.tra",
]


@dataclass
class ProjectConfig:
    """Which files to convert, where from, where to."""
    tra_root: str = "iwd2ee/tra"
    output_root: str = "l10n"
    languages: list[LanguageSpec] = field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    files: list[str] = field(default_factory=lambda: list(DEFAULT_FILES))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectConfig":
        """Create from a parsed manifest; missing keys keep their defaults."""
        if not isinstance(data, dict):
            raise ConfigError("Manifest root must be a mapping")

        config = cls()
        if "tra_root" in data:
            config.tra_root = str(data["tra_root"])
        if "output_root" in data:
            config.output_root = str(data["output_root"])

        if "languages" in data:
            languages = []
            for item in data["languages"] or []:
                if not isinstance(item, dict) or "directory" not in item or "code" not in item:
                    raise ConfigError(
                        f"Language entry must have 'directory' and 'code': {item!r}"
                    )
                languages.append(LanguageSpec(
                    directory=str(item["directory"]),
                    code=str(item["code"]),
                    encoding=str(item.get("encoding", "utf-8")),
                ))
            config.languages = languages

        if "files" in data:
            files = data["files"] or []
            if not isinstance(files, list):
                raise ConfigError("'files' must be a list of file names")
            config.files = [str(f) for f in files]

        return config

    @classmethod
    def load(cls, path: Optional[str] = None) -> "ProjectConfig":
        """
        Load a YAML manifest, or the defaults when no path is given.

        Raises:
            ConfigError: If the file is missing or not valid YAML
        """
        if path is None:
            return cls()

        manifest = Path(path)
        try:
            content = manifest.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigError(f"Manifest not found: {manifest}") from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {manifest}: {e}") from e

        return cls.from_dict(data or {})


@dataclass
class PlannedConversion:
    """One (input, output, encoding) triple."""
    language: str
    input_path: Path
    output_path: Path
    encoding: str


def language_dir(source: Path, config: ProjectConfig, language: LanguageSpec) -> Path:
    return Path(source) / config.tra_root / language.directory


def check_language_dirs(source, config: ProjectConfig) -> dict[str, bool]:
    """Report which language directories exist under the source tree."""
    return {
        language.directory: language_dir(source, config, language).is_dir()
        for language in config.languages
    }


def plan_conversions(
    source,
    config: ProjectConfig,
    output_dir=None,
) -> Iterator[PlannedConversion]:
    """
    Yield the conversions for every language x file pair.

    Args:
        source: Mod source directory
        config: Project manifest
        output_dir: Base directory for output_root (default: current directory)
    """
    base = Path(output_dir) if output_dir else Path.cwd()
    for language in config.languages:
        for tra_file in config.files:
            yield PlannedConversion(
                language=language.code,
                input_path=language_dir(source, config, language) / tra_file,
                output_path=base / config.output_root / language.code / f"{tra_file}.json",
                encoding=language.encoding,
            )


def convert_tree(
    source,
    config: Optional[ProjectConfig] = None,
    output_dir=None,
    strict: bool = False,
) -> dict:
    """
    Convert every planned file, one after another.

    Missing source files are reported as skipped; any other conversion
    error aborts the run.

    Returns:
        Result dictionary with per-file results and totals
    """
    config = config or ProjectConfig()
    source = Path(source)
    if not source.is_dir():
        raise SourceNotFoundError(f"Source directory not found: {source}")

    results = []
    converted = 0
    skipped = 0
    entries = 0

    for plan in plan_conversions(source, config, output_dir):
        try:
            result = tra_to_json(plan.input_path, plan.output_path, plan.encoding, strict=strict)
        except SourceNotFoundError:
            logger.warning("Skipping missing file %s", plan.input_path)
            skipped += 1
            results.append({
                "status": "skipped",
                "language": plan.language,
                "input_file": str(plan.input_path),
                "reason": "not found",
            })
            continue
        except ConversionError:
            logger.error("Conversion failed for %s", plan.input_path)
            raise

        converted += 1
        entries += result["stats"]["entries"]
        result["language"] = plan.language
        results.append(result)

    return {
        "status": "ok",
        "source": str(source),
        "languages": check_language_dirs(source, config),
        "stats": {
            "converted": converted,
            "skipped": skipped,
            "entries": entries,
        },
        "files": results,
        "summary": f"{converted} files converted, {skipped} skipped, {entries} entries total.",
    }
