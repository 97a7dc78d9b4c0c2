"""
Модуль бизнес-логики раскладки файлов.

Объединяет этапы обработки: обход каталога, удаление и исключение файлов
по расширению, отбор по префиксу, планирование новых имен, запись
манифеста и перемещение файлов.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .config_loader import Config
from .logger import FileOrganizerLogger
from .file_ops import FileOps, FileOperationError, TraversalError
from .manifest import ManifestWriter, ManifestWriteError
from .planner import FileRecord, RenamePlanner


class OrganizeError(Exception):
    """Исключение для фатальных ошибок обработки."""
    pass


class OrganizeStats:
    """Класс для хранения статистики обработки."""

    def __init__(self):
        self.total_files = 0
        self.deleted_files = 0
        self.excluded_files = 0
        self.selected_files = 0
        self.planned_files = 0
        self.moved_files = 0
        self.failed_files = 0
        self.skipped = False
        self.manifest_path: Optional[Path] = None
        self.start_time = None
        self.end_time = None
        self.errors = []

    def add_error(self, file_path: str, error: Exception):
        """Добавляет ошибку в список."""
        self.errors.append({
            'path': str(file_path),
            'error': str(error),
            'timestamp': datetime.now()
        })

    def get_duration(self) -> Optional[float]:
        """Возвращает продолжительность обработки в секундах."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def get_success_rate(self) -> float:
        """Возвращает процент успешно перемещенных файлов."""
        if self.planned_files == 0:
            return 0.0
        return (self.moved_files / self.planned_files) * 100

    def to_dict(self) -> Dict:
        """Преобразует статистику в словарь."""
        return {
            'total_files': self.total_files,
            'deleted_files': self.deleted_files,
            'excluded_files': self.excluded_files,
            'selected_files': self.selected_files,
            'planned_files': self.planned_files,
            'moved_files': self.moved_files,
            'failed_files': self.failed_files,
            'skipped': self.skipped,
            'manifest_path': str(self.manifest_path) if self.manifest_path else None,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.get_duration(),
            'success_rate': self.get_success_rate(),
            'error_count': len(self.errors)
        }


class Organizer:
    """Основной класс для раскладки файлов."""

    def __init__(self, config: Config, logger: FileOrganizerLogger):
        """
        Инициализация обработчика.

        Args:
            config: Конфигурация приложения
            logger: Логгер для записи операций
        """
        self.config = config
        self.logger = logger
        self.file_ops = FileOps(config.organizer, logger)
        self.planner = RenamePlanner(config.organizer, logger)
        self.manifest_writer = ManifestWriter(config.organizer.manifest_dir, logger)
        self.stats = OrganizeStats()

    def build_plan(self, dry_run: bool = False) -> List[FileRecord]:
        """
        Выполняет этапы до записи манифеста и возвращает план.

        Args:
            dry_run: Не удалять файлы, только сообщить о них

        Returns:
            List[FileRecord]: План перемещения

        Raises:
            OrganizeError: Если исходный каталог не читается
        """
        settings = self.config.organizer

        try:
            paths = self.file_ops.list_files(settings.root_path, settings.recursive)
        except TraversalError as e:
            self.logger.log_critical_error("Ошибка обхода каталога", e)
            raise OrganizeError(str(e))

        self.stats.total_files = len(paths)
        self.logger.log_stage("Найдено файлов", len(paths))

        remaining, deleted = self.file_ops.delete_by_extension(paths, dry_run=dry_run)
        self.stats.deleted_files = len(deleted)
        self.logger.log_stage("Удалено по расширению", self.stats.deleted_files)

        kept = self.file_ops.exclude_by_extension(remaining)
        self.stats.excluded_files = len(remaining) - len(kept)
        self.logger.log_stage("Исключено по расширению", self.stats.excluded_files)

        records = self.file_ops.select_by_prefix(kept)
        self.stats.selected_files = len(records)
        self.logger.log_stage("Отобрано по префиксу", len(records))

        plan = self.planner.plan(records)
        self.stats.planned_files = len(plan)
        self.logger.log_stage("Запланировано перемещений", len(plan))

        return plan

    def apply_plan(self, plan: List[FileRecord]) -> None:
        """
        Перемещает файлы по плану. Ошибка по одному файлу не прерывает
        обработку остальных.

        Args:
            plan: План перемещения
        """
        for record in plan:
            try:
                self.file_ops.move_file(record)
                self.stats.moved_files += 1
            except FileOperationError as e:
                self.stats.failed_files += 1
                self.stats.add_error(record.file_path, e)
                self.logger.log_file_error(Path(record.file_path), e)

    def run(self) -> OrganizeStats:
        """
        Выполняет полную обработку каталога.

        Returns:
            OrganizeStats: Статистика обработки

        Raises:
            OrganizeError: Если каталог не читается или манифест не записан
        """
        settings = self.config.organizer
        self.stats.start_time = datetime.now()

        if not settings.create_folder:
            self.stats.skipped = True
            self.stats.end_time = datetime.now()
            self.logger.log_system_info("isCreateFolderFlag = false: обработка пропущена")
            return self.stats

        self.logger.log_run_start(settings.root_path, settings.recursive)

        plan = self.build_plan()

        # Файлы перемещаются только после успешной записи манифеста
        try:
            self.stats.manifest_path = self.manifest_writer.write(plan)
        except ManifestWriteError as e:
            raise OrganizeError(str(e))

        self.apply_plan(plan)

        self.stats.end_time = datetime.now()
        self.logger.log_run_end(self.stats.planned_files, self.stats.moved_files,
                                self.stats.failed_files)
        return self.stats


def create_organizer(config: Config, logger: FileOrganizerLogger) -> Organizer:
    """
    Фабричная функция для создания обработчика.

    Args:
        config: Конфигурация приложения
        logger: Логгер

    Returns:
        Organizer: Объект обработчика
    """
    return Organizer(config, logger)
