"""
Output Emitter: 렌더 결과 → 출력 루트 아래 파일.

규칙:
- 출력 루트는 이미 존재해야 함 (OUTPUT_DIR_MISSING)
- 기존 파일은 overwrite 지정 시에만 교체 (OUTPUT_CONFLICT)
- 쓰기는 원자적: 부분적으로 쓰인 파일이 남지 않음
- overwrite 미지정 쓰기는 배타적: 확인 후 생긴 파일도 덮어쓰지 않음
- 내용은 바이트 그대로 (개행 변환 없음)
"""

import errno
import hashlib
import logging
from pathlib import Path, PurePosixPath

from crud_scaffold.core.atomic import atomic_write_bytes
from crud_scaffold.domain.errors import (
    ErrorCodes,
    OutputConflictError,
    OutputDirectoryMissingError,
    OutputError,
    OutputPermissionError,
)
from crud_scaffold.domain.schemas import OutputResult, OutputStatus

logger = logging.getLogger(__name__)


class OutputEmitter:
    """출력 루트 기준 파일 작성기."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def resolve(self, relative_path: str) -> Path:
        """
        상대 경로 → 절대 경로.

        Raises:
            OutputError: INVALID_OUTPUT_PATH (루트 밖으로 나가는 경로)
        """
        relative = PurePosixPath(relative_path)
        if relative.is_absolute() or ".." in relative.parts:
            raise OutputError(
                ErrorCodes.INVALID_OUTPUT_PATH,
                f"Output path escapes the output root: {relative_path}",
                path=relative_path,
            )
        return self.root.joinpath(*relative.parts)

    def check_root(self) -> None:
        """
        Raises:
            OutputDirectoryMissingError: 출력 루트 없음
        """
        if not self.root.is_dir():
            raise OutputDirectoryMissingError(str(self.root))

    def exists(self, relative_path: str) -> bool:
        return self.resolve(relative_path).exists()

    def emit(
        self,
        relative_path: str,
        text: str,
        overwrite: bool = False,
        make_parents: bool = False,
        template: str = "",
    ) -> OutputResult:
        """
        파일 1개 작성.

        Args:
            relative_path: 출력 루트 기준 POSIX 상대 경로
            text: 파일 내용
            overwrite: 기존 파일 교체 허용
            make_parents: 루트 아래 중간 디렉토리 생성
            template: 결과 기록용 템플릿 이름

        Returns:
            OutputResult (status=WRITTEN)

        Raises:
            OutputDirectoryMissingError: 출력 루트 또는 대상 디렉토리 없음
            OutputConflictError: 파일 존재 + overwrite 미지정
            OutputPermissionError: 권한 부족
            OutputError: OUTPUT_WRITE_FAILED (그 외 OS 에러)
        """
        self.check_root()
        target = self.resolve(relative_path)
        data = text.encode("utf-8")

        if target.exists() and not overwrite:
            raise OutputConflictError(relative_path)

        try:
            if make_parents:
                target.parent.mkdir(parents=True, exist_ok=True)
            elif not target.parent.is_dir():
                raise OutputDirectoryMissingError(str(target.parent))

            try:
                atomic_write_bytes(target, data, overwrite=overwrite)
            except FileExistsError as e:
                # 확인 이후 다른 쓰기가 먼저 파일을 만든 경우
                raise OutputConflictError(relative_path) from e
        except PermissionError as e:
            raise OutputPermissionError(relative_path) from e
        except OSError as e:
            if e.errno in (errno.EACCES, errno.EPERM, errno.EROFS):
                raise OutputPermissionError(relative_path) from e
            raise OutputError(
                ErrorCodes.OUTPUT_WRITE_FAILED,
                f"Failed to write {relative_path}: {e}",
                path=relative_path,
            ) from e

        logger.info(f"Wrote {relative_path} ({len(data)} bytes)")
        return OutputResult(
            template=template,
            path=relative_path,
            status=OutputStatus.WRITTEN,
            sha256=hashlib.sha256(data).hexdigest(),
            size=len(data),
        )
