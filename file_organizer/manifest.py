"""
Модуль записи и чтения манифеста.

Манифест фиксирует план перемещения до любых изменений в файловой системе.
Перемещение выполняется только после успешной записи манифеста.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .logger import FileOrganizerLogger
from .planner import FileRecord

MANIFEST_TIME_FORMAT = "%Y-%m-%d_%H-%M-%S"
MANIFEST_SUFFIX = "_output.json"


class ManifestError(Exception):
    """Исключение для ошибок работы с манифестом."""
    pass


class ManifestWriteError(ManifestError):
    """Исключение для ошибок записи манифеста."""
    pass


class ManifestReadError(ManifestError):
    """Исключение для ошибок чтения манифеста."""
    pass


def manifest_filename(timestamp: datetime) -> str:
    """Возвращает имя файла манифеста для момента времени."""
    return timestamp.strftime(MANIFEST_TIME_FORMAT) + MANIFEST_SUFFIX


class ManifestWriter:
    """Класс для записи манифеста перемещений."""

    def __init__(self, output_dir: Path, logger: FileOrganizerLogger):
        """
        Инициализация записи манифеста.

        Args:
            output_dir: Каталог для файлов манифеста
            logger: Логгер для записи операций
        """
        self.output_dir = Path(output_dir)
        self.logger = logger

    def write(self, records: List[FileRecord], timestamp: Optional[datetime] = None) -> Path:
        """
        Записывает план в файл <timestamp>_output.json.

        Имя файла имеет точность до секунды. Если манифест с таким именем
        уже существует, запись завершается ошибкой.

        Args:
            records: Записи плана
            timestamp: Время для имени файла (по умолчанию текущее)

        Returns:
            Path: Путь к записанному манифесту

        Raises:
            ManifestWriteError: Если план не удалось сериализовать или записать
        """
        if timestamp is None:
            timestamp = datetime.now()

        manifest_path = self.output_dir / manifest_filename(timestamp)

        try:
            payload = json.dumps([record.to_dict() for record in records],
                                 indent='\t', ensure_ascii=False)
        except (TypeError, ValueError) as e:
            self.logger.log_critical_error("Ошибка сериализации манифеста", e)
            raise ManifestWriteError(f"Ошибка сериализации манифеста: {e}")

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            # Существующий манифест не перезаписывается
            with open(manifest_path, 'x', encoding='utf-8') as f:
                f.write(payload)
        except OSError as e:
            self.logger.log_critical_error(f"Ошибка записи манифеста {manifest_path}", e)
            raise ManifestWriteError(f"Ошибка записи манифеста {manifest_path}: {e}")

        self.logger.log_manifest_written(manifest_path, len(records))
        return manifest_path


def read_manifest(manifest_path: Path) -> List[FileRecord]:
    """
    Читает манифест, записанный ManifestWriter.

    Args:
        manifest_path: Путь к файлу манифеста

    Returns:
        List[FileRecord]: Записи плана

    Raises:
        ManifestReadError: Если файл не найден или имеет неверный формат
    """
    try:
        with open(manifest_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ManifestReadError(f"Ошибка чтения манифеста {manifest_path}: {e}")
    except json.JSONDecodeError as e:
        raise ManifestReadError(f"Некорректный JSON в манифесте {manifest_path}: {e}")

    if not isinstance(data, list):
        raise ManifestReadError(f"Манифест должен содержать JSON-массив: {manifest_path}")

    try:
        return [FileRecord.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        raise ManifestReadError(f"Некорректная запись в манифесте {manifest_path}: {e}")
