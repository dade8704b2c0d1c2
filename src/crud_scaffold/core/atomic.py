"""
원자적 파일 쓰기.

동작:
- 중간 상태 없음: 같은 디렉토리의 temp → rename
- overwrite=False: temp → hard link, 대상이 있으면 FileExistsError
- 가능한 환경에서 내구성 강화: 파일 fsync + 디렉토리 fsync
- fsync 실패 시 경고 남기고 계속 진행
- 실패 시 cleanup: temp 파일 삭제, 기존 파일 보존
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _fsync_dir(dir_path: Path) -> None:
    """
    디렉토리 fsync (가능한 환경에서).

    Linux에서 주로 유효하며, 일부 OS/파일시스템에서는 지원되지 않을 수 있음.
    """
    try:
        dir_fd = os.open(str(dir_path), os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except (OSError, AttributeError) as e:
        # O_DIRECTORY 미지원 (Windows 등)
        logger.debug(f"Directory fsync skipped for {dir_path}: {e}")


def atomic_write_bytes(path: Path, data: bytes, overwrite: bool = True) -> None:
    """
    원자적 바이트 쓰기.

    부모 디렉토리는 이미 존재해야 한다 (생성은 호출자 책임).

    Args:
        path: 저장할 파일 경로
        data: 파일 내용
        overwrite: False면 temp를 hard link로 게시 (대상이 있으면 실패)

    Raises:
        FileExistsError: overwrite=False인데 대상이 이미 있음 (기존 파일 보존)
        OSError: temp 생성/rename 실패 (temp는 정리됨)
    """
    dir_path = path.parent

    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=dir_path,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            f.write(data)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning(
                    f"File fsync failed for {path}: {e}. "
                    f"Data may not be durable on power loss."
                )

        if overwrite:
            os.replace(temp_path, path)
        else:
            os.link(temp_path, path)
            temp_path.unlink()
        _fsync_dir(dir_path)

    except BaseException:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                logger.warning(f"Failed to remove temp file {temp_path}")
        raise


def atomic_write_text(path: Path, text: str) -> None:
    """UTF-8 텍스트 원자적 쓰기 (개행 변환 없음)."""
    atomic_write_bytes(path, text.encode("utf-8"))


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    """
    원자적 JSON 쓰기 (부모 디렉토리 자동 생성).

    Args:
        path: 저장할 파일 경로
        data: JSON 직렬화할 데이터
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
