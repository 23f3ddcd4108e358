# main.py

from PyQt5.QtWidgets import QApplication
from mainwindow import MainWindow
import logging
import sys

def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    window = MainWindow()
    window.resize(1200, 800)
    window.show()
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()
