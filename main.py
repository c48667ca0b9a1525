"""
Entry point: wire storage, repository and UI, then run the Tk main loop.
"""

import logging
import tkinter as tk

from storeaudit.repository import AuditRepo
from storeaudit.storage import JsonFileKeyValueStore, get_data_path
from storeaudit.ui import AppUI


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    path = get_data_path()
    logging.getLogger(__name__).info("Using audit data file %s", path)

    kv = JsonFileKeyValueStore(path)
    repo = AuditRepo(kv)

    root = tk.Tk()
    AppUI(root, repo, kv)
    root.mainloop()


if __name__ == "__main__":
    main()
