"""
템플릿 관리자: 조회 + custom 템플릿 CRUD + builtin 불변 가드.

규칙:
- 템플릿은 논리 이름으로 조회 ("api/controller-crud"), 파일 배치와 무관
- 조회 순서: custom → builtin (같은 이름이면 custom이 가림)
- builtin 코퍼스는 패키지 데이터, 수정 불가 (BUILTIN_IMMUTABLE)
- custom 템플릿 수정은 템플릿별 파일 락으로 직렬화
- manifest.yaml: 출력 경로 패턴, 선택 블록 선언, preset
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import yaml
from filelock import FileLock, Timeout

from crud_scaffold.domain.constants import (
    DEFAULT_TEMPLATE_EXTENSION,
    FORBIDDEN_PATH_CHARS,
    PLACEHOLDER_NAME_PATTERN,
    SOURCE_BUILTIN,
    SOURCE_CUSTOM,
    TEMPLATE_EXTENSION_MAX_LENGTH,
    TEMPLATE_EXTENSION_PATTERN,
    TEMPLATE_FILE_MARKER,
    TEMPLATE_LOCKS_DIR,
    TEMPLATE_MANIFEST_FILENAME,
    TEMPLATE_NAME_MAX_LENGTH,
    TEMPLATE_NAME_PATTERN,
)
from crud_scaffold.domain.errors import ErrorCodes, TemplateError, TemplateNotFoundError
from crud_scaffold.domain.schemas import Template
from crud_scaffold.templates.scanner import detect_placeholders

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES_ROOT = Path(__file__).resolve().parent.parent / "builtin_templates"

PRESET_REFERENCE_PREFIX = "@"

# =============================================================================
# Validation
# =============================================================================


def validate_template_name(name: str) -> None:
    """
    템플릿 논리 이름 검증.

    규칙:
    - 소문자 + 숫자 + 하이픈, '/'로 구분된 2단계 이상 ("api/controller-crud")
    - 각 세그먼트는 소문자 또는 숫자로 시작
    - 최대 80자

    Raises:
        TemplateError: INVALID_TEMPLATE_NAME
    """
    if not name:
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_NAME,
            "template name cannot be empty",
        )

    if len(name) > TEMPLATE_NAME_MAX_LENGTH:
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_NAME,
            f"template name exceeds {TEMPLATE_NAME_MAX_LENGTH} characters",
            length=len(name),
        )

    if not TEMPLATE_NAME_PATTERN.fullmatch(name):
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_NAME,
            "template name must be lowercase segments separated by '/' "
            "(e.g. 'api/controller-crud')",
            name=name,
            pattern=TEMPLATE_NAME_PATTERN.pattern,
        )


def validate_template_extension(extension: str) -> None:
    """
    템플릿 파일 확장자 검증.

    규칙:
    - 소문자 + 숫자만 ("cs", "md")
    - 최대 10자
    - 금지 문자: / \\ : * ? " < > | 공백 .

    Raises:
        TemplateError: INVALID_TEMPLATE_NAME
    """
    if not extension or len(extension) > TEMPLATE_EXTENSION_MAX_LENGTH:
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_NAME,
            f"template extension must be 1-{TEMPLATE_EXTENSION_MAX_LENGTH} characters",
            extension=extension,
        )

    found_forbidden = set(extension) & FORBIDDEN_PATH_CHARS
    if found_forbidden:
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_NAME,
            f"template extension contains forbidden characters: {sorted(found_forbidden)}",
            extension=extension,
            forbidden=sorted(found_forbidden),
        )

    if not TEMPLATE_EXTENSION_PATTERN.fullmatch(extension):
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_NAME,
            "template extension must be lowercase alphanumeric (e.g. 'cs')",
            extension=extension,
            pattern=TEMPLATE_EXTENSION_PATTERN.pattern,
        )


def get_template_path(root: Path, name: str, extension: str = DEFAULT_TEMPLATE_EXTENSION) -> Path:
    """
    논리 이름 → 템플릿 파일 경로.

    "api/controller-crud" → <root>/api/controller-crud.template.cs
    """
    *dirs, leaf = name.split("/")
    return root.joinpath(*dirs) / f"{leaf}{TEMPLATE_FILE_MARKER}{extension}"


def _name_from_path(root: Path, path: Path) -> str:
    relative = path.relative_to(root)
    leaf = relative.name.split(TEMPLATE_FILE_MARKER, 1)[0]
    return "/".join([*relative.parent.parts, leaf])


# =============================================================================
# Manifest
# =============================================================================


def _empty_manifest() -> dict[str, Any]:
    return {"templates": {}, "presets": {}}


def load_manifest(root: Path | None) -> dict[str, Any]:
    """
    manifest.yaml 로드 + 형식 검증.

    파일이 없으면 빈 manifest.

    Raises:
        TemplateError: MANIFEST_INVALID
    """
    if root is None:
        return _empty_manifest()

    manifest_path = root / TEMPLATE_MANIFEST_FILENAME
    if not manifest_path.exists():
        return _empty_manifest()

    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise TemplateError(
            ErrorCodes.MANIFEST_INVALID,
            f"manifest is not valid YAML: {e}",
            path=str(manifest_path),
        ) from e

    _validate_manifest(data, manifest_path)
    return {
        "templates": dict(data.get("templates") or {}),
        "presets": dict(data.get("presets") or {}),
    }


def _validate_manifest(data: Any, manifest_path: Path) -> None:
    def invalid(message: str, **context: Any) -> TemplateError:
        return TemplateError(
            ErrorCodes.MANIFEST_INVALID, message, path=str(manifest_path), **context
        )

    if not isinstance(data, dict):
        raise invalid("manifest root must be a mapping")

    templates = data.get("templates") or {}
    if not isinstance(templates, dict):
        raise invalid("'templates' must be a mapping")

    for name, entry in templates.items():
        if not isinstance(entry, dict):
            raise invalid("template entry must be a mapping", template=name)
        for key in ("output", "description"):
            if key in entry and not isinstance(entry[key], str):
                raise invalid(f"'{key}' must be a string", template=name)
        blocks = entry.get("optional_blocks", [])
        if not isinstance(blocks, list) or not all(
            isinstance(b, str) and PLACEHOLDER_NAME_PATTERN.fullmatch(b) for b in blocks
        ):
            raise invalid("'optional_blocks' must be a list of UPPER_SNAKE names", template=name)

    presets = data.get("presets") or {}
    if not isinstance(presets, dict):
        raise invalid("'presets' must be a mapping")
    for preset, items in presets.items():
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            raise invalid("preset must be a list of template names", preset=preset)


# =============================================================================
# Template Manager
# =============================================================================


class TemplateManager:
    """
    템플릿 조회 + custom 템플릿 관리자.

    구조:
    <root>/
    ├── manifest.yaml
    ├── .locks/                 # custom만
    └── <category>/<name>.template.<ext>
    """

    # 락 timeout (초)
    LOCK_TIMEOUT = 10.0

    def __init__(
        self,
        custom_root: Path | None = None,
        builtin_root: Path = BUILTIN_TEMPLATES_ROOT,
    ):
        """
        Args:
            custom_root: 사용자 템플릿 루트 (없으면 builtin만)
            builtin_root: 내장 코퍼스 루트
        """
        self.builtin_root = builtin_root
        self.custom_root = custom_root
        self._manifest: dict[str, Any] | None = None

    @contextmanager
    def _template_lock(self, name: str) -> Generator[None, None, None]:
        """
        custom 템플릿별 락 획득.

        Raises:
            TemplateError: TEMPLATE_LOCK_TIMEOUT
        """
        custom_root = self._require_custom_root()
        locks_dir = custom_root / TEMPLATE_LOCKS_DIR
        locks_dir.mkdir(parents=True, exist_ok=True)
        lock = FileLock(locks_dir / f"{name.replace('/', '__')}.lock", timeout=self.LOCK_TIMEOUT)

        try:
            lock.acquire()
        except Timeout as e:
            raise TemplateError(
                ErrorCodes.TEMPLATE_LOCK_TIMEOUT,
                f"Failed to acquire lock for template '{name}'",
                template=name,
                timeout=self.LOCK_TIMEOUT,
            ) from e

        try:
            yield
        finally:
            lock.release()

    # =========================================================================
    # Manifest / Presets
    # =========================================================================

    @property
    def manifest(self) -> dict[str, Any]:
        """builtin + custom manifest 병합 (lazy, custom 우선)."""
        if self._manifest is None:
            builtin = load_manifest(self.builtin_root)
            custom = load_manifest(self.custom_root)
            self._manifest = {
                "templates": {**builtin["templates"], **custom["templates"]},
                "presets": {**builtin["presets"], **custom["presets"]},
            }
        return self._manifest

    def list_presets(self) -> dict[str, list[str]]:
        """preset 이름 → 원본 항목 목록."""
        return {name: list(items) for name, items in self.manifest["presets"].items()}

    def resolve_preset(self, preset: str) -> list[str]:
        """
        preset → 템플릿 이름 목록 (순서 유지, 중복 제거).

        "@other" 항목은 다른 preset을 펼친다.

        Raises:
            TemplateError: UNKNOWN_PRESET (없는 preset 또는 순환 참조)
        """
        resolved: list[str] = []
        self._expand_preset(preset, resolved, stack=[])
        return list(dict.fromkeys(resolved))

    def _expand_preset(self, preset: str, out: list[str], stack: list[str]) -> None:
        presets = self.manifest["presets"]
        if preset not in presets:
            raise TemplateError(
                ErrorCodes.UNKNOWN_PRESET,
                f"Preset '{preset}' not found",
                preset=preset,
                available=sorted(presets),
            )
        if preset in stack:
            raise TemplateError(
                ErrorCodes.UNKNOWN_PRESET,
                f"Preset '{preset}' references itself",
                chain=[*stack, preset],
            )

        for item in presets[preset]:
            if item.startswith(PRESET_REFERENCE_PREFIX):
                self._expand_preset(item[len(PRESET_REFERENCE_PREFIX):], out, [*stack, preset])
            else:
                out.append(item)

    # =========================================================================
    # Read
    # =========================================================================

    def load(self, name: str) -> Template:
        """
        템플릿 로드.

        Args:
            name: 논리 이름

        Returns:
            Template

        Raises:
            TemplateError: INVALID_TEMPLATE_NAME, TEMPLATE_ENCODING_INVALID
            TemplateNotFoundError: TEMPLATE_NOT_FOUND
        """
        validate_template_name(name)

        path, source = self._locate(name)
        try:
            text = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise TemplateError(
                ErrorCodes.TEMPLATE_ENCODING_INVALID,
                f"Template '{name}' is not valid UTF-8 at byte {e.start}",
                template=name,
                path=str(path),
                offset=e.start,
            ) from e

        entry = self.manifest["templates"].get(name, {})
        extension = path.name.split(TEMPLATE_FILE_MARKER, 1)[1]

        return Template(
            name=name,
            text=text,
            source=source,
            path=path,
            output=entry.get("output") or f"{name}.{extension}",
            description=entry.get("description", ""),
            placeholders=tuple(detect_placeholders(text)),
            declared_optional=frozenset(entry.get("optional_blocks", [])),
        )

    def exists(self, name: str) -> bool:
        try:
            self._locate(name)
        except TemplateNotFoundError:
            return False
        return True

    def list_names(self, source: str = "all") -> list[str]:
        """
        템플릿 이름 목록 (정렬).

        Args:
            source: "builtin", "custom", 또는 "all"
        """
        names: set[str] = set()
        if source in (SOURCE_BUILTIN, "all"):
            names.update(self._scan_root(self.builtin_root))
        if source in (SOURCE_CUSTOM, "all") and self.custom_root is not None:
            names.update(self._scan_root(self.custom_root))
        return sorted(names)

    def list_templates(self, source: str = "all") -> list[Template]:
        """템플릿 목록 (custom이 builtin을 가린 결과, 읽을 수 없는 파일은 제외)."""
        templates = []
        for name in self.list_names(source):
            try:
                templates.append(self.load(name))
            except TemplateError as e:
                if e.code != ErrorCodes.TEMPLATE_ENCODING_INVALID:
                    raise
                logger.warning(f"Template skipped in listing: {e.message}")
        if source == "all":
            return templates
        return [t for t in templates if t.source == source]

    # =========================================================================
    # Custom Template Management
    # =========================================================================

    def create(
        self,
        name: str,
        text: str,
        description: str = "",
        output: str = "",
        optional_blocks: list[str] | None = None,
        extension: str = DEFAULT_TEMPLATE_EXTENSION,
        shadow_builtin: bool = False,
    ) -> Path:
        """
        custom 템플릿 등록.

        Args:
            name: 논리 이름
            text: 템플릿 본문
            description: 설명
            output: 출력 경로 패턴
            optional_blocks: 선택 블록 선언
            extension: 파일 확장자
            shadow_builtin: 같은 이름의 builtin을 가리는 것을 허용

        Returns:
            저장된 파일 경로

        Raises:
            TemplateError: INVALID_TEMPLATE_NAME, TEMPLATE_EXISTS, BUILTIN_IMMUTABLE
        """
        validate_template_name(name)
        validate_template_extension(extension)
        custom_root = self._require_custom_root()

        with self._template_lock(name):
            if self._find_file(custom_root, name) is not None:
                raise TemplateError(
                    ErrorCodes.TEMPLATE_EXISTS,
                    f"Custom template '{name}' already exists",
                    template=name,
                )

            if not shadow_builtin and self._find_file(self.builtin_root, name) is not None:
                raise TemplateError(
                    ErrorCodes.BUILTIN_IMMUTABLE,
                    f"'{name}' is a built-in template. Pass shadow_builtin to override it.",
                    template=name,
                )

            target = get_template_path(custom_root, name, extension)
            if not target.resolve().is_relative_to(custom_root.resolve()):
                raise TemplateError(
                    ErrorCodes.INVALID_TEMPLATE_NAME,
                    f"Template path escapes the custom template root: {target}",
                    template=name,
                )
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(text.encode("utf-8"))

            self._save_manifest_entry(name, description, output, optional_blocks)
            logger.info(f"Custom template created: {name} ({target})")
            return target

    def update(
        self,
        name: str,
        text: str,
        description: str | None = None,
        output: str | None = None,
        optional_blocks: list[str] | None = None,
    ) -> Path:
        """
        custom 템플릿 본문/메타 교체.

        Raises:
            TemplateError: BUILTIN_IMMUTABLE (builtin만 있는 이름)
            TemplateNotFoundError: TEMPLATE_NOT_FOUND
        """
        validate_template_name(name)
        custom_root = self._require_custom_root()

        with self._template_lock(name):
            target = self._require_custom_file(custom_root, name)
            target.write_bytes(text.encode("utf-8"))

            entry = self.manifest["templates"].get(name, {})
            self._save_manifest_entry(
                name,
                entry.get("description", "") if description is None else description,
                entry.get("output", "") if output is None else output,
                entry.get("optional_blocks") if optional_blocks is None else optional_blocks,
            )
            logger.info(f"Custom template updated: {name}")
            return target

    def delete(self, name: str) -> None:
        """
        custom 템플릿 삭제 (가려진 builtin이 있으면 다시 보임).

        Raises:
            TemplateError: BUILTIN_IMMUTABLE
            TemplateNotFoundError: TEMPLATE_NOT_FOUND
        """
        validate_template_name(name)
        custom_root = self._require_custom_root()

        with self._template_lock(name):
            target = self._require_custom_file(custom_root, name)
            target.unlink()
            self._remove_manifest_entry(name)
            logger.info(f"Custom template deleted: {name}")

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _require_custom_root(self) -> Path:
        if self.custom_root is None:
            raise TemplateError(
                ErrorCodes.BUILTIN_IMMUTABLE,
                "No custom template directory configured; built-in templates are read-only",
            )
        return self.custom_root

    def _require_custom_file(self, custom_root: Path, name: str) -> Path:
        target = self._find_file(custom_root, name)
        if target is not None:
            return target
        if self._find_file(self.builtin_root, name) is not None:
            raise TemplateError(
                ErrorCodes.BUILTIN_IMMUTABLE,
                f"'{name}' is a built-in template and cannot be modified",
                template=name,
            )
        raise TemplateNotFoundError(name)

    def _locate(self, name: str) -> tuple[Path, str]:
        """템플릿 파일 위치 (custom 먼저)."""
        if self.custom_root is not None:
            path = self._find_file(self.custom_root, name)
            if path is not None:
                return path, SOURCE_CUSTOM

        path = self._find_file(self.builtin_root, name)
        if path is not None:
            return path, SOURCE_BUILTIN

        raise TemplateNotFoundError(name)

    @staticmethod
    def _find_file(root: Path, name: str) -> Path | None:
        *dirs, leaf = name.split("/")
        directory = root.joinpath(*dirs)
        if not directory.is_dir():
            return None
        matches = sorted(directory.glob(f"{leaf}{TEMPLATE_FILE_MARKER}*"))
        return matches[0] if matches else None

    @staticmethod
    def _scan_root(root: Path) -> list[str]:
        if not root.exists():
            return []
        return [
            _name_from_path(root, path)
            for path in root.rglob(f"*{TEMPLATE_FILE_MARKER}*")
            if path.is_file() and TEMPLATE_LOCKS_DIR not in path.relative_to(root).parts
        ]

    def _read_custom_manifest(self) -> dict[str, Any]:
        custom_root = self._require_custom_root()
        manifest_path = custom_root / TEMPLATE_MANIFEST_FILENAME
        if not manifest_path.exists():
            return {"templates": {}, "presets": {}}
        with open(manifest_path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _write_custom_manifest(self, data: dict[str, Any]) -> Path:
        """custom manifest.yaml 저장 + 캐시 무효화."""
        manifest_path = self._require_custom_root() / TEMPLATE_MANIFEST_FILENAME
        with open(manifest_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=True)
        self._manifest = None
        return manifest_path

    def _save_manifest_entry(
        self,
        name: str,
        description: str,
        output: str,
        optional_blocks: list[str] | None,
    ) -> None:
        data = self._read_custom_manifest()
        templates = data.setdefault("templates", {}) or {}
        entry: dict[str, Any] = {}
        if description:
            entry["description"] = description
        if output:
            entry["output"] = output
        if optional_blocks:
            entry["optional_blocks"] = list(optional_blocks)
        templates[name] = entry
        data["templates"] = templates
        self._write_custom_manifest(data)

    def _remove_manifest_entry(self, name: str) -> None:
        data = self._read_custom_manifest()
        templates = data.get("templates") or {}
        if name in templates:
            del templates[name]
            data["templates"] = templates
        self._write_custom_manifest(data)
