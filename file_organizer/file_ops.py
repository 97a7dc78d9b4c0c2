"""
Модуль для операций с файловой системой.

Обеспечивает обход исходного каталога, фильтрацию файлов по расширению
и префиксу имени, а также перемещение файлов в структуру каталогов по дате.
"""

import errno
import os
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .config_loader import OrganizerConfig
from .logger import FileOrganizerLogger
from .planner import FileRecord, get_extension


# Коды ошибок os.link, при которых жесткие ссылки недоступны
_LINK_UNSUPPORTED = {errno.EPERM, errno.ENOTSUP, errno.EOPNOTSUPP, errno.EMLINK}


class FileOperationError(Exception):
    """Исключение для ошибок операций с файлами."""
    pass


class TraversalError(FileOperationError):
    """Исключение для случая, когда исходный каталог нельзя прочитать."""
    pass


def has_extension(file_path: Union[str, Path], extensions: Iterable[str]) -> bool:
    """
    Проверяет расширение файла без учета регистра.

    Args:
        file_path: Путь к файлу
        extensions: Нормализованные расширения (".jpg")

    Returns:
        bool: True если расширение файла есть в списке
    """
    extension = get_extension(Path(file_path).name).lower()
    return bool(extension) and extension in extensions


class FileOps:
    """Класс для операций с файловой системой."""

    def __init__(self, config: OrganizerConfig, logger: FileOrganizerLogger):
        """
        Инициализация операций с файлами.

        Args:
            config: Конфигурация отбора и раскладки файлов
            logger: Логгер для записи операций
        """
        self.config = config
        self.logger = logger
        self.base_path = Path(config.root_path)

    def list_files(self, root: Optional[Path] = None, recursive: Optional[bool] = None) -> List[Path]:
        """
        Получает список файлов каталога.

        Args:
            root: Каталог для обхода (по умолчанию из конфигурации)
            recursive: Обходить ли подкаталоги (по умолчанию из конфигурации)

        Returns:
            List[Path]: Абсолютные пути к файлам

        Raises:
            TraversalError: Если каталог не существует или не читается
        """
        root = Path(root) if root is not None else self.base_path
        if recursive is None:
            recursive = self.config.recursive

        if not root.exists():
            raise TraversalError(f"Исходный каталог не найден: {root}")
        if not root.is_dir():
            raise TraversalError(f"Исходный путь не является каталогом: {root}")

        root = root.absolute()
        try:
            if recursive:
                return self._walk(root)
            return self._list_directory(root)
        except OSError as e:
            self.logger.log_file_error(root, e)
            raise TraversalError(f"Ошибка чтения каталога {root}: {e}")

    @staticmethod
    def _list_directory(root: Path) -> List[Path]:
        with os.scandir(root) as entries:
            names = sorted(entry.name for entry in entries if not entry.is_dir())
        return [root / name for name in names]

    @staticmethod
    def _walk(root: Path) -> List[Path]:
        def on_error(error: OSError) -> None:
            raise error

        files = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            # Обход в глубину в алфавитном порядке
            dirnames.sort()
            files.extend(Path(dirpath) / name for name in sorted(filenames))
        return files

    def delete_by_extension(self, paths: List[Path],
                            dry_run: bool = False) -> Tuple[List[Path], List[Path]]:
        """
        Удаляет файлы с расширениями из списка на удаление.

        Ошибка удаления не прерывает работу: она логируется, а файл
        всё равно исключается из дальнейшей обработки.

        Args:
            paths: Пути к файлам
            dry_run: Только сообщить, не удаляя файлы

        Returns:
            Tuple[List[Path], List[Path]]: Оставшиеся файлы и фактически
                удаленные файлы
        """
        remaining = []
        deleted = []
        for path in paths:
            if not has_extension(path, self.config.delete_extensions):
                remaining.append(path)
                continue

            if dry_run:
                self.logger.log_system_info(f"Файл будет удален: {path}")
                continue

            try:
                os.remove(path)
            except OSError as e:
                self.logger.log_file_error(path, e)
                self.logger.log_file_operation("delete", path, False)
                continue

            deleted.append(path)
            self.logger.log_file_deleted(path)
            self.logger.log_file_operation("delete", path, True)

        return remaining, deleted

    def exclude_by_extension(self, paths: List[Path]) -> List[Path]:
        """
        Исключает из обработки файлы с расширениями из списка исключений.
        Файлы на диске не изменяются.

        Args:
            paths: Пути к файлам

        Returns:
            List[Path]: Оставшиеся файлы
        """
        return [path for path in paths if not has_extension(path, self.config.exclude_extensions)]

    def get_file_record(self, path: Path) -> Optional[FileRecord]:
        """
        Получает информацию о файле, если его имя начинается с одного из префиксов.

        Args:
            path: Путь к файлу

        Returns:
            FileRecord или None: Информация о файле или None если файл не подходит
        """
        try:
            stat_result = path.stat()
        except FileNotFoundError:
            self.logger.log_warning(f"Файл не существует: {path}")
            return None
        except OSError as e:
            self.logger.log_file_error(path, e)
            return None

        name = path.name
        if not any(name.startswith(prefix) for prefix in self.config.prefixes):
            return None

        self.logger.log_file_operation("stat", path, True)
        return FileRecord(
            name=name,
            mod_time=datetime.fromtimestamp(stat_result.st_mtime).astimezone(),
            file_path=str(path)
        )

    def select_by_prefix(self, paths: List[Path]) -> List[FileRecord]:
        """
        Отбирает файлы, имя которых начинается с одного из префиксов.

        Args:
            paths: Пути к файлам

        Returns:
            List[FileRecord]: Отобранные файлы
        """
        records = []
        for path in paths:
            record = self.get_file_record(path)
            if record is not None:
                records.append(record)
        return records

    def _ensure_directory_exists(self, directory: Path) -> Path:
        """
        Создает каталог назначения если он не существует.

        Raises:
            FileOperationError: Если каталог не удалось создать
        """
        try:
            directory.mkdir(mode=0o777, parents=True, exist_ok=True)
            self.logger.log_file_operation("mkdir", directory, True)
            return directory
        except OSError as e:
            self.logger.log_file_operation("mkdir", directory, False)
            raise FileOperationError(f"Ошибка создания каталога {directory}: {e}")

    def move_file(self, record: FileRecord) -> Path:
        """
        Перемещает файл в запланированное место.

        Args:
            record: Запись с заполненными planned_name и planned_path

        Returns:
            Path: Путь к перемещенному файлу

        Raises:
            FileOperationError: Если каталог не создан, место занято или
                переименование не удалось
        """
        if record.destination is None:
            raise FileOperationError(f"Для файла {record.file_path} нет плана перемещения")

        source_path = Path(record.file_path)
        target_path = Path(record.destination)

        self._ensure_directory_exists(Path(record.planned_path))

        try:
            self._rename_no_replace(source_path, target_path)
        except FileExistsError:
            self.logger.log_file_operation("move", source_path, False)
            raise FileOperationError(f"Файл назначения уже существует: {target_path}")
        except OSError as e:
            self.logger.log_file_operation("move", source_path, False)
            raise FileOperationError(f"Ошибка перемещения файла {source_path}: {e}")

        self.logger.log_file_moved(source_path, target_path)
        self.logger.log_file_operation("move", target_path, True)
        return target_path

    @staticmethod
    def _rename_no_replace(source: Path, target: Path) -> None:
        """
        Переименовывает файл, не заменяя существующий файл назначения.

        Жесткая ссылка создается атомарно и завершается FileExistsError,
        если имя уже занято. Если файловая система не поддерживает жесткие
        ссылки, выполняется rename с предварительной проверкой.

        Raises:
            FileExistsError: Если файл назначения существует
            OSError: При других ошибках файловой системы
        """
        options = {'follow_symlinks': False} if os.link in os.supports_follow_symlinks else {}
        try:
            os.link(source, target, **options)
        except OSError as e:
            if e.errno not in _LINK_UNSUPPORTED:
                raise
            if target.exists():
                raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(target))
            os.rename(source, target)
            return

        try:
            os.unlink(source)
        except OSError:
            # Не оставляем файл под двумя именами
            os.unlink(target)
            raise


def create_file_ops(config: OrganizerConfig, logger: FileOrganizerLogger) -> FileOps:
    """
    Фабричная функция для создания объекта FileOps.

    Args:
        config: Конфигурация отбора и раскладки файлов
        logger: Логгер

    Returns:
        FileOps: Объект для операций с файлами
    """
    return FileOps(config, logger)
