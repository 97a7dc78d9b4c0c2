"""
Главный модуль CLI интерфейса для утилиты раскладки файлов.

Предоставляет командный интерфейс для обработки каталога, предварительного
просмотра плана и просмотра манифестов прошлых запусков.
"""

import argparse
import sys
from pathlib import Path

from .config_loader import load_config
from .logger import FileOrganizerLogger
from .manifest import ManifestReadError, read_manifest
from .organizer import OrganizeError, create_organizer


class FileOrganizerCLI:
    """Класс для обработки команд CLI."""

    def __init__(self):
        self.config = None
        self.logger = None
        self.organizer = None

    def setup(self, config_path: str = "config.json") -> bool:
        """
        Инициализирует CLI с конфигурацией.

        Args:
            config_path: Путь к файлу конфигурации

        Returns:
            bool: True если инициализация успешна
        """
        try:
            self.config = load_config(config_path)
            self.logger = FileOrganizerLogger(self.config.logging)
            self.organizer = create_organizer(self.config, self.logger)

            self.logger.log_config_loaded(config_path)
            return True

        except (OSError, ValueError) as e:
            print(f"❌ Ошибка инициализации: {e}")
            return False

    def cmd_run(self, args) -> int:
        """
        Команда полной обработки каталога.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        try:
            stats = self.organizer.run()
        except OrganizeError as e:
            print(f"❌ Ошибка обработки: {e}")
            return 1

        if stats.skipped:
            print("ℹ️ Создание каталогов отключено (isCreateFolderFlag = false), файлы не изменены")
            return 0

        print(f"\n✅ Обработка завершена!")
        print(f"📊 Статистика:")
        print(f"   • Найдено файлов: {stats.total_files}")
        print(f"   • Удалено: {stats.deleted_files}")
        print(f"   • Исключено: {stats.excluded_files}")
        print(f"   • Отобрано: {stats.selected_files}")
        print(f"   • Перемещено: {stats.moved_files} из {stats.planned_files}")
        print(f"   • Ошибок: {stats.failed_files}")
        print(f"   • Манифест: {stats.manifest_path}")
        print(f"   • Продолжительность: {stats.get_duration():.2f} сек")

        if stats.failed_files > 0:
            print(f"\n⚠️ Обнаружено {stats.failed_files} ошибок:")
            for error in stats.errors[:10]:  # Показываем первые 10 ошибок
                print(f"   • {error['path']}: {error['error']}")
            if len(stats.errors) > 10:
                print(f"   ... и еще {len(stats.errors) - 10} ошибок")

        return 0 if stats.failed_files == 0 else 1

    def cmd_plan(self, args) -> int:
        """
        Команда предварительного просмотра плана без изменения файлов.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        try:
            plan = self.organizer.build_plan(dry_run=True)
        except OrganizeError as e:
            print(f"❌ Ошибка построения плана: {e}")
            return 1

        if not plan:
            print("ℹ️ Нет файлов для перемещения")
            return 0

        print(f"📋 План перемещения ({len(plan)} файлов):")
        for i, record in enumerate(plan):
            print(f"   {i+1:2d}. {record.file_path} → {record.destination}")
        return 0

    def cmd_show_manifest(self, args) -> int:
        """
        Команда просмотра манифеста.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        try:
            records = read_manifest(Path(args.manifest))
        except ManifestReadError as e:
            print(f"❌ {e}")
            return 1

        print(f"📝 Манифест {args.manifest} ({len(records)} записей):")
        for i, record in enumerate(records):
            print(f"   {i+1:2d}. {record.name} ({record.mod_time.isoformat()})")
            print(f"       {record.file_path} → {record.destination}")
        return 0


def create_parser() -> argparse.ArgumentParser:
    """
    Создает парсер аргументов командной строки.

    Returns:
        argparse.ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        description="Утилита раскладки файлов по каталогам на основе даты изменения",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:

  # Обработка каталога по config.json
  python -m file_organizer run

  # Просмотр плана без изменения файлов
  python -m file_organizer --config my_config.json plan

  # Просмотр манифеста прошлого запуска
  python -m file_organizer show-manifest 2024-01-15_10-30-00_output.json
        """
    )

    parser.add_argument(
        '--config',
        default='config.json',
        help='Путь к файлу конфигурации (по умолчанию: config.json)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Подробный вывод'
    )

    subparsers = parser.add_subparsers(dest='command', help='Доступные команды')

    subparsers.add_parser('run', help='Обработка каталога')
    subparsers.add_parser('plan', help='Просмотр плана без изменения файлов')

    manifest_parser = subparsers.add_parser('show-manifest', help='Просмотр манифеста')
    manifest_parser.add_argument('manifest', help='Путь к файлу манифеста')

    return parser


def main(argv=None):
    """Главная функция CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cli = FileOrganizerCLI()

    # Манифест читается без конфигурации
    if args.command == 'show-manifest':
        return cli.cmd_show_manifest(args)

    if not cli.setup(args.config):
        return 1

    try:
        if args.command == 'run':
            return cli.cmd_run(args)
        elif args.command == 'plan':
            return cli.cmd_plan(args)
        else:
            print(f"❌ Неизвестная команда: {args.command}")
            return 1

    except KeyboardInterrupt:
        print("\n⚠️ Операция прервана пользователем")
        return 1
    except Exception as e:
        print(f"❌ Неожиданная ошибка: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        cli.logger.close()


if __name__ == "__main__":
    sys.exit(main())
