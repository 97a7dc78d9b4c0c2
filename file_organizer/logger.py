"""
Модуль для настройки и управления логированием приложения.

Обеспечивает централизованную настройку логирования с ротацией файлов,
цветным выводом в консоль и различными уровнями детализации.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime

from .config_loader import LoggingConfig

# Типы обработчиков, которые настраивает FileOrganizerLogger
OWN_HANDLER_TYPES = (logging.handlers.RotatingFileHandler, logging.StreamHandler)


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветным выводом для консоли."""

    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Форматирует запись лога с цветом."""
        # Цвет не должен попасть в файловый обработчик, поэтому работаем с копией
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"

        return super().format(record)


class FileOrganizerLogger:
    """Класс для управления логированием приложения File Organizer."""

    LOGGER_NAME = 'file_organizer'

    def __init__(self, config: LoggingConfig):
        """
        Инициализация логгера.

        Args:
            config: Конфигурация логирования
        """
        self.config = config
        self.logger: Optional[logging.Logger] = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Настраивает логгер с файловым и консольным выводом."""
        level = getattr(logging, self.config.level.upper())

        self.logger = logging.getLogger(self.LOGGER_NAME)
        self.logger.setLevel(level)

        # Закрываем и убираем обработчики предыдущей настройки
        self._remove_own_handlers()

        fmt = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        datefmt = '%Y-%m-%d %H:%M:%S'
        formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)
        colored_formatter = ColoredFormatter(fmt=fmt, datefmt=datefmt)

        # Создаем каталог для логов
        log_file_path = Path(self.config.log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        # Файловый обработчик с ротацией
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file_path,
            maxBytes=self.config.max_log_size * 1024 * 1024,  # MB -> байты
            backupCount=self.config.backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(colored_formatter)
        console_handler.setLevel(level)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

        # Предотвращаем дублирование сообщений
        self.logger.propagate = False

    def get_logger(self) -> logging.Logger:
        """
        Возвращает настроенный логгер.

        Returns:
            logging.Logger: Настроенный логгер
        """
        if self.logger is None:
            raise RuntimeError("Логгер не инициализирован")
        return self.logger

    def close(self) -> None:
        """Закрывает обработчики логгера."""
        if self.logger is None:
            return
        self._remove_own_handlers()

    def _remove_own_handlers(self) -> None:
        # Посторонние обработчики (например, добавленные тестовым окружением) не трогаем
        for handler in self.logger.handlers[:]:
            if type(handler) in OWN_HANDLER_TYPES:
                handler.close()
                self.logger.removeHandler(handler)

    def log_run_start(self, root_path: Path, recursive: bool) -> None:
        """
        Логирует начало обработки каталога.

        Args:
            root_path: Исходный каталог
            recursive: Признак рекурсивного обхода
        """
        mode = "рекурсивно" if recursive else "только верхний уровень"
        self.logger.info(f"🚀 Начало обработки каталога {root_path} ({mode})")
        self.logger.info(f"⏰ Время начала: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_run_end(self, planned_files: int, moved_files: int, failed_files: int) -> None:
        """
        Логирует завершение обработки.

        Args:
            planned_files: Файлов в плане
            moved_files: Успешно перемещено
            failed_files: Ошибок при перемещении
        """
        self.logger.info(f"✅ Обработка завершена")
        self.logger.info(f"📊 Статистика:")
        self.logger.info(f"   • В плане: {planned_files}")
        self.logger.info(f"   • Перемещено: {moved_files}")
        self.logger.info(f"   • Ошибок: {failed_files}")
        self.logger.info(f"⏰ Время завершения: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_stage(self, stage: str, count: int) -> None:
        """
        Логирует результат этапа конвейера.

        Args:
            stage: Название этапа
            count: Количество файлов после этапа
        """
        self.logger.info(f"📦 {stage}: {count}")

    def log_file_deleted(self, file_path: Path) -> None:
        """
        Логирует удаление файла по расширению.

        Args:
            file_path: Путь к удаленному файлу
        """
        self.logger.info(f"🗑️ Файл удален: {file_path}")

    def log_file_moved(self, source_path: Path, target_path: Path) -> None:
        """
        Логирует успешное перемещение файла.

        Args:
            source_path: Исходный путь
            target_path: Целевой путь
        """
        self.logger.info(f"📁 Файл перемещен: {source_path} → {target_path}")

    def log_file_error(self, file_path: Path, error: Exception) -> None:
        """
        Логирует ошибку при обработке файла.

        Args:
            file_path: Путь к файлу
            error: Исключение
        """
        self.logger.error(f"❌ Ошибка при обработке файла {file_path}: {error}")

    def log_file_operation(self, operation: str, file_path: Path, success: bool = True) -> None:
        """
        Логирует операцию с файлом.

        Args:
            operation: Тип операции (stat, mkdir, move, delete)
            file_path: Путь к файлу
            success: Успешность операции
        """
        status = "✅" if success else "❌"
        self.logger.debug(f"{status} {operation.upper()}: {file_path}")

    def log_manifest_written(self, manifest_path: Path, entries: int) -> None:
        """
        Логирует запись манифеста.

        Args:
            manifest_path: Путь к файлу манифеста
            entries: Количество записей
        """
        self.logger.info(f"📝 Манифест записан: {manifest_path} (записей: {entries})")

    def log_config_loaded(self, config_path: str) -> None:
        """
        Логирует успешную загрузку конфигурации.

        Args:
            config_path: Путь к файлу конфигурации
        """
        self.logger.info(f"⚙️ Конфигурация загружена из {config_path}")

    def log_system_info(self, info: str) -> None:
        """
        Логирует системную информацию.

        Args:
            info: Информационное сообщение
        """
        self.logger.info(f"ℹ️ {info}")

    def log_warning(self, message: str) -> None:
        """
        Логирует предупреждение.

        Args:
            message: Сообщение предупреждения
        """
        self.logger.warning(f"⚠️ {message}")

    def log_critical_error(self, message: str, error: Exception = None) -> None:
        """
        Логирует критическую ошибку.

        Args:
            message: Сообщение об ошибке
            error: Исключение (опционально)
        """
        if error:
            self.logger.critical(f"💥 {message}: {error}")
        else:
            self.logger.critical(f"💥 {message}")


def setup_logger(config: LoggingConfig) -> logging.Logger:
    """
    Удобная функция для быстрой настройки логгера.

    Args:
        config: Конфигурация логирования

    Returns:
        logging.Logger: Настроенный логгер
    """
    organizer_logger = FileOrganizerLogger(config)
    return organizer_logger.get_logger()


def get_logger(name: str = FileOrganizerLogger.LOGGER_NAME) -> logging.Logger:
    """
    Получает логгер по имени.

    Args:
        name: Имя логгера

    Returns:
        logging.Logger: Логгер
    """
    return logging.getLogger(name)
