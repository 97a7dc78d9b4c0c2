"""
Модуль для загрузки и валидации конфигурации приложения.

Обеспечивает централизованную загрузку параметров из config.json
с валидацией и удобным доступом к настройкам.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple
from dataclasses import dataclass

from .time_layout import LayoutError, validate_layout


@dataclass(frozen=True)
class OrganizerConfig:
    """Конфигурация отбора и раскладки файлов."""
    root_path: Path
    prefixes: Tuple[str, ...] = ()
    recursive: bool = False
    exclude_extensions: Tuple[str, ...] = ()
    delete_extensions: Tuple[str, ...] = ()
    create_folder: bool = False
    folder_layout: str = ""
    file_layout: str = ""
    output_root: str = ""
    manifest_dir: Path = Path(".")


@dataclass(frozen=True)
class LoggingConfig:
    """Конфигурация логирования."""
    level: str = "INFO"
    log_file: Path = Path("logs/organizer.log")
    max_log_size: int = 10
    backup_count: int = 5


@dataclass(frozen=True)
class Config:
    """Основная конфигурация приложения."""
    organizer: OrganizerConfig
    logging: LoggingConfig


def normalize_extension(extension: str) -> str:
    """
    Приводит расширение к виду ".ext" в нижнем регистре.

    Args:
        extension: Расширение с точкой или без ("JPG", ".jpg")

    Returns:
        str: Нормализованное расширение
    """
    extension = extension.strip().lower()
    if extension and not extension.startswith('.'):
        extension = '.' + extension
    return extension


class ConfigLoader:
    """Класс для загрузки и валидации конфигурации."""

    def __init__(self, config_path: str = "config.json"):
        """
        Инициализация загрузчика конфигурации.

        Args:
            config_path: Путь к файлу конфигурации
        """
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """
        Загружает конфигурацию из файла.

        Returns:
            Config: Объект конфигурации

        Raises:
            FileNotFoundError: Если файл конфигурации не найден
            ValueError: Если конфигурация некорректна
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Файл конфигурации не найден: {self.config_path}")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Ошибка разбора JSON конфигурации: {e}")

        if not isinstance(data, dict):
            raise ValueError("Конфигурация должна быть JSON-объектом")

        try:
            organizer_config = self._load_organizer_config(data)
            logging_config = self._load_logging_config(data.get('logging') or {})
        except (TypeError, KeyError) as e:
            raise ValueError(f"Ошибка загрузки конфигурации: {e}")

        self._config = Config(organizer=organizer_config, logging=logging_config)

        # Валидация конфигурации
        self._validate_config()

        return self._config

    def _load_organizer_config(self, data: Dict[str, Any]) -> OrganizerConfig:
        """Загружает параметры отбора и раскладки файлов."""
        if not data.get('path'):
            raise ValueError("Параметр 'path' не задан в конфигурации")

        return OrganizerConfig(
            root_path=Path(self._get_str(data, 'path')),
            prefixes=self._get_str_list(data, 'prefixes'),
            recursive=self._get_bool(data, 'isRecursive'),
            exclude_extensions=tuple(
                normalize_extension(ext) for ext in self._get_str_list(data, 'removeFileType')
                if ext.strip()
            ),
            delete_extensions=tuple(
                normalize_extension(ext) for ext in self._get_str_list(data, 'deleteFileType')
                if ext.strip()
            ),
            create_folder=self._get_bool(data, 'isCreateFolderFlag'),
            folder_layout=self._get_str(data, 'folderLayout'),
            file_layout=self._get_str(data, 'fileLayout'),
            output_root=self._get_str(data, 'outFilePath'),
            manifest_dir=Path(self._get_str(data, 'manifestDir', '.'))
        )

    def _load_logging_config(self, data: Dict[str, Any]) -> LoggingConfig:
        """Загружает конфигурацию логирования."""
        if not isinstance(data, dict):
            raise ValueError("Секция 'logging' должна быть JSON-объектом")

        return LoggingConfig(
            level=self._get_str(data, 'level', 'INFO'),
            log_file=Path(self._get_str(data, 'logFile', 'logs/organizer.log')),
            max_log_size=self._get_int(data, 'maxLogSize', 10),
            backup_count=self._get_int(data, 'backupCount', 5)
        )

    @staticmethod
    def _get_str(data: Dict[str, Any], key: str, default: str = "") -> str:
        value = data.get(key, default)
        if value is None:
            return default
        if not isinstance(value, str):
            raise ValueError(f"Параметр '{key}' должен быть строкой")
        return value

    @staticmethod
    def _get_bool(data: Dict[str, Any], key: str, default: bool = False) -> bool:
        value = data.get(key, default)
        if not isinstance(value, bool):
            raise ValueError(f"Параметр '{key}' должен быть true или false")
        return value

    @staticmethod
    def _get_int(data: Dict[str, Any], key: str, default: int) -> int:
        value = data.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Параметр '{key}' должен быть целым числом")
        return value

    @staticmethod
    def _get_str_list(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
        value = data.get(key) or []
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ValueError(f"Параметр '{key}' должен быть списком строк")
        return _unique(value)

    def _validate_config(self) -> None:
        """Валидирует загруженную конфигурацию."""
        if not self._config:
            raise ValueError("Конфигурация не загружена")

        organizer = self._config.organizer

        # Шаблоны и каталог назначения нужны только при раскладке по каталогам
        if organizer.create_folder:
            if not organizer.output_root:
                raise ValueError("Параметр 'outFilePath' обязателен при isCreateFolderFlag = true")
            try:
                validate_layout(organizer.folder_layout)
                validate_layout(organizer.file_layout)
            except LayoutError as e:
                raise ValueError(f"Некорректный шаблон даты: {e}")

        # Проверка параметров логирования
        logging_config = self._config.logging
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if logging_config.level.upper() not in valid_levels:
            raise ValueError(f"Некорректный уровень логирования: {logging_config.level}")

        if logging_config.max_log_size <= 0:
            raise ValueError("Размер файла лога должен быть больше 0")

        if logging_config.backup_count < 0:
            raise ValueError("Количество архивных логов не может быть отрицательным")

    def get_config(self) -> Config:
        """
        Возвращает загруженную конфигурацию.

        Returns:
            Config: Объект конфигурации

        Raises:
            ValueError: Если конфигурация не загружена
        """
        if self._config is None:
            raise ValueError("Конфигурация не загружена. Вызовите load_config() сначала.")
        return self._config

    def reload_config(self) -> Config:
        """
        Перезагружает конфигурацию из файла.

        Returns:
            Config: Обновленный объект конфигурации
        """
        self._config = None
        return self.load_config()


def _unique(items: Iterable[str]) -> Tuple[str, ...]:
    """Убирает повторы, сохраняя порядок."""
    return tuple(dict.fromkeys(items))


def load_config(config_path: str = "config.json") -> Config:
    """
    Удобная функция для быстрой загрузки конфигурации.

    Args:
        config_path: Путь к файлу конфигурации

    Returns:
        Config: Объект конфигурации
    """
    loader = ConfigLoader(config_path)
    return loader.load_config()
