"""
File Organizer Utility

Утилита для раскладки файлов по каталогам и именам, построенным
из даты изменения файла.
"""

__version__ = "1.0.0"
__author__ = "File Organizer Team"
__description__ = "Utility for organizing files into a date-based folder structure"
