# plugins/core_assets/filesystem.py

import os
import logging
import shutil
from pathlib import Path
from typing import Iterable, List, Union

from .models import PublishMode

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# 系统或版本控制产生的杂项条目，索引时忽略
IGNORED_ENTRIES = frozenset({
    '.DS_Store', '.git', '.gitignore', '.svn', '.htaccess', 'Thumbs.db', '@eaDir',
})


def index(root: PathLike, recursive: bool = False, ignore: Iterable[str] = IGNORED_ENTRIES) -> List[str]:
    """
    列出 root 下的所有条目（文件和目录），返回 POSIX 风格的相对路径。
    目录不存在时返回空列表。符号链接不会被跟随进入。
    """
    root = Path(root)
    if not root.is_dir():
        return []

    ignored = set(ignore)
    result: List[str] = []

    def _walk(directory: Path, prefix: str):
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if entry.name in ignored:
                continue
            relative = f"{prefix}{entry.name}"
            result.append(relative)
            if recursive and entry.is_dir() and not entry.is_symlink():
                _walk(entry, f"{relative}/")

    _walk(root, "")
    return result


def is_file(path: PathLike) -> bool:
    """普通文件，或指向普通文件的符号链接。"""
    return Path(path).is_file()


def remove_file(path: PathLike) -> None:
    """删除文件或符号链接（包括失效的链接）。失败时抛出 OSError。"""
    Path(path).unlink()
    logger.debug(f"Removed file: {path}")


def remove_dir(path: PathLike) -> None:
    """递归删除目录。失败时抛出 OSError。"""
    path = Path(path)
    if path.is_symlink():
        # 指向目录的链接只删除链接本身
        path.unlink()
    else:
        shutil.rmtree(path)
    logger.debug(f"Removed directory: {path}")


def link(source: PathLike, target: PathLike, mode: PublishMode = PublishMode.SYMLINK) -> Path:
    """
    让 source 出现在 target 位置：优先符号链接，不支持时退回复制。
    target 已经存在视为成功（幂等）；指向已不存在文件的旧链接会被重建。
    """
    source, target = Path(source), Path(target)

    if target.is_symlink() and not target.exists():
        logger.debug(f"Replacing dangling link {target}.")
        target.unlink(missing_ok=True)
    elif target.exists():
        return target

    target.parent.mkdir(parents=True, exist_ok=True)

    try:
        if mode == PublishMode.SYMLINK:
            try:
                os.symlink(source, target)
                return target
            except FileExistsError:
                raise
            except (NotImplementedError, OSError) as e:
                logger.debug(f"Symlink not available for {target} ({e}); copying instead.")

        shutil.copy2(source, target)
    except FileExistsError:
        # 并发请求抢先创建了同一个文件
        pass

    return target
