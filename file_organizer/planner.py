"""
Модуль планирования переименования файлов.

Для каждого отобранного файла вычисляет новое имя и каталог назначения
по дате изменения файла и шаблонам из конфигурации.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple

from .config_loader import OrganizerConfig
from .logger import FileOrganizerLogger
from .time_layout import format_time


def get_extension(name: str) -> str:
    """
    Возвращает расширение имени файла вместе с точкой.

    Расширением считается всё после последней точки, в том числе для
    имен вида ".bashrc". Регистр сохраняется.
    """
    index = name.rfind('.')
    if index < 0:
        return ''
    return name[index:]


@dataclass
class FileRecord:
    """Информация о файле и его запланированном расположении."""
    name: str
    mod_time: datetime
    file_path: str
    planned_name: Optional[str] = None
    planned_path: Optional[str] = None

    @property
    def extension(self) -> str:
        return get_extension(self.name)

    @property
    def destination(self) -> Optional[str]:
        """Полный путь назначения или None, если файл не запланирован."""
        if self.planned_name is None or self.planned_path is None:
            return None
        return self.planned_path + self.planned_name

    def to_dict(self) -> Dict[str, Any]:
        """Преобразует запись в словарь для манифеста."""
        return {
            'name': self.name,
            'modTime': self.mod_time.isoformat(),
            'filePath': self.file_path,
            'reName': self.planned_name,
            'reFilePath': self.planned_path
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileRecord':
        """Создает запись из словаря манифеста."""
        return cls(
            name=data['name'],
            mod_time=datetime.fromisoformat(data['modTime']),
            file_path=data['filePath'],
            planned_name=data.get('reName'),
            planned_path=data.get('reFilePath')
        )


class RenamePlanner:
    """Класс для построения плана переименования."""

    def __init__(self, config: OrganizerConfig, logger: FileOrganizerLogger):
        """
        Инициализация планировщика.

        Args:
            config: Конфигурация отбора и раскладки файлов
            logger: Логгер для записи операций
        """
        self.config = config
        self.logger = logger

    def plan(self, records: List[FileRecord]) -> List[FileRecord]:
        """
        Строит план переименования.

        Если раскладка по каталогам отключена, план пустой. Совпадающие
        места назначения получают суффикс _1, _2 ... в порядке записей.

        Args:
            records: Отобранные файлы

        Returns:
            List[FileRecord]: Записи с заполненными planned_name и planned_path
        """
        if not self.config.create_folder:
            self.logger.log_system_info("Создание каталогов отключено, план пуст")
            return []

        planned: List[FileRecord] = []
        taken: Set[Tuple[str, str]] = set()

        for record in records:
            planned_path = self._plan_path(record.mod_time)
            base_name = format_time(record.mod_time, self.config.file_layout)
            planned_name = self._unique_name(planned_path, base_name, record.extension, taken)

            if planned_name != base_name + record.extension:
                self.logger.log_warning(
                    f"Совпадение имени назначения для {record.file_path}, "
                    f"используется {planned_name}"
                )

            taken.add((planned_path, planned_name))
            record.planned_name = planned_name
            record.planned_path = planned_path
            planned.append(record)

        return planned

    def _plan_path(self, mod_time: datetime) -> str:
        folder = format_time(mod_time, self.config.folder_layout)
        return self.config.output_root + "/" + folder + "/"

    @staticmethod
    def _unique_name(planned_path: str, base_name: str, extension: str,
                     taken: Set[Tuple[str, str]]) -> str:
        """Подбирает первое свободное имя в каталоге назначения."""
        name = base_name + extension
        counter = 1
        while (planned_path, name) in taken:
            name = f"{base_name}_{counter}{extension}"
            counter += 1
        return name


def create_planner(config: OrganizerConfig, logger: FileOrganizerLogger) -> RenamePlanner:
    """
    Фабричная функция для создания планировщика.

    Args:
        config: Конфигурация отбора и раскладки файлов
        logger: Логгер

    Returns:
        RenamePlanner: Объект планировщика
    """
    return RenamePlanner(config, logger)
