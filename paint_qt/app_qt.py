# paint_qt/app_qt.py
"""
Main Application Entry Point - Bảng vẽ
Khởi động cửa sổ vẽ, cấu hình logging và QApplication
"""

import sys
import logging
from pathlib import Path
from datetime import datetime

from PySide6.QtWidgets import QApplication, QMessageBox
from PySide6.QtCore import Qt

from paint_qt.window import PaintWindowQt


# ========== LOGGING SETUP ==========
def setup_logging(level=logging.INFO, log_dir: str = "logs"):
    """Cấu hình logging cho ứng dụng"""
    log_path = Path(log_dir)
    log_path.mkdir(exist_ok=True)

    log_file = log_path / f"paint_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler()
        ]
    )

    return logging.getLogger(__name__)


# ========== APPLICATION SETUP ==========
def setup_application():
    """Cấu hình QApplication"""
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("PaintQt")
    app.setApplicationDisplayName("Bảng vẽ")
    app.setOrganizationName("PaintQt")
    app.setStyle("Fusion")
    return app


def main():
    """Main entry point của ứng dụng"""
    dev = "--dev" in sys.argv
    logger = setup_logging(logging.DEBUG if dev else logging.INFO)
    logger.info("=" * 70)
    logger.info("🚀 Starting Paint%s", " (development mode)" if dev else "")
    logger.info("=" * 70)

    app = setup_application()
    try:
        window = PaintWindowQt()
    except Exception as e:
        logger.exception("✗ Failed to create window")
        QMessageBox.critical(None, "Lỗi khởi động", f"Không thể tạo cửa sổ chính:\n{e}")
        return 1

    app.aboutToQuit.connect(lambda: logger.info("Application shutdown complete"))
    window.show()
    logger.info("✓ Application ready - Starting event loop")
    return app.exec()


# ========== ENTRY POINT ==========
if __name__ == "__main__":
    if "--help" in sys.argv:
        print("Paint - bảng vẽ raster")
        print("\nOptions:")
        print("  --dev        Verbose logging")
        print("  --help       Show this help message")
        sys.exit(0)
    sys.exit(main())
