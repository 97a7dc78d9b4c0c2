"""
Тесты для модуля main.py
"""

import json
import os
import pytest
from datetime import datetime
from unittest.mock import Mock, patch

from file_organizer.main import FileOrganizerCLI, create_parser, main
from file_organizer.organizer import OrganizeError, OrganizeStats
from file_organizer.planner import FileRecord


class TestFileOrganizerCLI:
    """Тесты для класса FileOrganizerCLI."""

    @pytest.fixture
    def mock_organizer(self):
        return Mock()

    @pytest.fixture
    def cli(self, mock_organizer):
        cli = FileOrganizerCLI()
        cli.config = Mock()
        cli.logger = Mock()
        cli.organizer = mock_organizer
        return cli

    @patch('file_organizer.main.load_config')
    @patch('file_organizer.main.FileOrganizerLogger')
    @patch('file_organizer.main.create_organizer')
    def test_setup_success(self, mock_create_organizer, mock_logger_class, mock_load_config):
        """Тест успешной инициализации CLI."""
        mock_config = Mock()
        mock_load_config.return_value = mock_config

        cli = FileOrganizerCLI()
        result = cli.setup("test_config.json")

        assert result is True
        assert cli.config == mock_config
        assert cli.logger == mock_logger_class.return_value
        assert cli.organizer == mock_create_organizer.return_value

        mock_load_config.assert_called_once_with("test_config.json")
        mock_logger_class.assert_called_once_with(mock_config.logging)
        mock_create_organizer.assert_called_once_with(mock_config, mock_logger_class.return_value)

    @patch('file_organizer.main.load_config')
    def test_setup_failure(self, mock_load_config):
        """Тест неудачной инициализации CLI."""
        mock_load_config.side_effect = ValueError("Config error")

        cli = FileOrganizerCLI()
        result = cli.setup("test_config.json")

        assert result is False
        assert cli.config is None
        assert cli.logger is None
        assert cli.organizer is None

    def _stats(self, **values):
        stats = OrganizeStats()
        stats.start_time = datetime(2024, 1, 1, 10, 0, 0)
        stats.end_time = datetime(2024, 1, 1, 10, 0, 1)
        for key, value in values.items():
            setattr(stats, key, value)
        return stats

    def test_cmd_run_success(self, cli, mock_organizer, capsys):
        """Тест успешной обработки."""
        mock_organizer.run.return_value = self._stats(planned_files=2, moved_files=2)

        result = cli.cmd_run(Mock())

        assert result == 0
        assert "Перемещено: 2 из 2" in capsys.readouterr().out

    def test_cmd_run_with_failures(self, cli, mock_organizer, capsys):
        """Тест обработки с ошибками перемещения."""
        stats = self._stats(planned_files=2, moved_files=1, failed_files=1)
        stats.add_error("/in/IMG_1.jpg", Exception("rename failed"))
        mock_organizer.run.return_value = stats

        result = cli.cmd_run(Mock())

        assert result == 1
        assert "/in/IMG_1.jpg: rename failed" in capsys.readouterr().out

    def test_cmd_run_skipped(self, cli, mock_organizer, capsys):
        """Тест пропуска обработки при отключенном создании каталогов."""
        mock_organizer.run.return_value = self._stats(skipped=True)

        result = cli.cmd_run(Mock())

        assert result == 0
        assert "isCreateFolderFlag = false" in capsys.readouterr().out

    def test_cmd_run_fatal_error(self, cli, mock_organizer, capsys):
        """Тест фатальной ошибки обработки."""
        mock_organizer.run.side_effect = OrganizeError("Исходный каталог не найден: /in")

        result = cli.cmd_run(Mock())

        assert result == 1
        assert "Исходный каталог не найден" in capsys.readouterr().out

    def test_cmd_plan(self, cli, mock_organizer, capsys):
        """Тест просмотра плана."""
        mock_organizer.build_plan.return_value = [
            FileRecord("IMG_1.jpg", datetime(2023, 5, 1), "/in/IMG_1.jpg",
                       "20230501_000000.jpg", "/out/2023/05/")
        ]

        result = cli.cmd_plan(Mock())

        assert result == 0
        mock_organizer.build_plan.assert_called_once_with(dry_run=True)
        assert "/in/IMG_1.jpg → /out/2023/05/20230501_000000.jpg" in capsys.readouterr().out

    def test_cmd_plan_empty(self, cli, mock_organizer, capsys):
        """Тест пустого плана."""
        mock_organizer.build_plan.return_value = []

        assert cli.cmd_plan(Mock()) == 0
        assert "Нет файлов для перемещения" in capsys.readouterr().out

    def test_cmd_plan_error(self, cli, mock_organizer):
        """Тест ошибки построения плана."""
        mock_organizer.build_plan.side_effect = OrganizeError("boom")

        assert cli.cmd_plan(Mock()) == 1

    def test_cmd_show_manifest(self, tmp_path, capsys):
        """Тест просмотра манифеста."""
        manifest = tmp_path / "2024-01-15_10-30-00_output.json"
        manifest.write_text(json.dumps([{
            'name': 'IMG_1.jpg',
            'modTime': '2023-05-01T00:00:00+00:00',
            'filePath': '/in/IMG_1.jpg',
            'reName': '20230501_000000.jpg',
            'reFilePath': '/out/2023/05/'
        }]), encoding='utf-8')
        args = Mock()
        args.manifest = str(manifest)

        result = FileOrganizerCLI().cmd_show_manifest(args)

        output = capsys.readouterr().out
        assert result == 0
        assert "1 записей" in output
        assert "/out/2023/05/20230501_000000.jpg" in output

    def test_cmd_show_manifest_missing(self, tmp_path):
        """Тест просмотра несуществующего манифеста."""
        args = Mock()
        args.manifest = str(tmp_path / "missing.json")

        assert FileOrganizerCLI().cmd_show_manifest(args) == 1


class TestCreateParser:
    """Тесты для функции create_parser."""

    def test_defaults(self):
        args = create_parser().parse_args(['run'])

        assert args.command == 'run'
        assert args.config == 'config.json'
        assert args.verbose is False

    def test_show_manifest_requires_path(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(['show-manifest'])

    def test_global_options(self):
        args = create_parser().parse_args(['--config', 'my.json', '-v', 'plan'])

        assert args.config == 'my.json'
        assert args.verbose is True
        assert args.command == 'plan'


class TestMain:
    """Сквозные тесты функции main."""

    @pytest.fixture
    def workspace(self, tmp_path):
        root = tmp_path / "in"
        root.mkdir()
        photo = root / "IMG_001.jpg"
        photo.write_text("image")
        timestamp = datetime(2023, 5, 1).timestamp()
        os.utime(photo, (timestamp, timestamp))
        (root / "a.tmp").write_text("temp")

        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "path": str(root),
            "prefixes": ["IMG_"],
            "deleteFileType": [".tmp"],
            "isCreateFolderFlag": True,
            "folderLayout": "YYYY/MM",
            "fileLayout": "YYYYMMDD_HHmmss",
            "outFilePath": str(tmp_path / "out"),
            "manifestDir": str(tmp_path / "manifests"),
            "logging": {"logFile": str(tmp_path / "logs" / "organizer.log")}
        }), encoding='utf-8')
        return tmp_path, config_file

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_invalid_config(self, tmp_path, capsys):
        assert main(['--config', str(tmp_path / "missing.json"), 'run']) == 1
        assert "Ошибка инициализации" in capsys.readouterr().out

    def test_run(self, workspace):
        tmp_path, config_file = workspace

        assert main(['--config', str(config_file), 'run']) == 0

        assert (tmp_path / "out" / "2023" / "05" / "20230501_000000.jpg").exists()
        assert not (tmp_path / "in" / "a.tmp").exists()
        assert len(list((tmp_path / "manifests").glob("*_output.json"))) == 1
        assert (tmp_path / "logs" / "organizer.log").exists()

    def test_plan_does_not_touch_files(self, workspace):
        tmp_path, config_file = workspace

        assert main(['--config', str(config_file), 'plan']) == 0

        assert (tmp_path / "in" / "IMG_001.jpg").exists()
        assert (tmp_path / "in" / "a.tmp").exists()
        assert not (tmp_path / "out").exists()
        assert not (tmp_path / "manifests").exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
