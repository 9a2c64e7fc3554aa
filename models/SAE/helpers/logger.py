# helpers/logger.py
import csv, json, datetime, pathlib
import matplotlib.pyplot as plt


class RunLogger:
    def __init__(self, root="runs", tag="run"):
        ts = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
        self.root = pathlib.Path(root)
        self.dir = self.root / f"{tag}_{ts}"
        self.dir.mkdir(parents=True, exist_ok=True)
        self.csv_path = self.dir / "history.csv"
        self.json_path = self.dir / "history.json"
        self.metrics = []  # list of dicts per epoch
        self._csv_header_written = False

    # ---------- logging ----------
    def log_epoch(self, epoch, **kwargs):
        row = {"epoch": int(epoch), **{k: float(v) for k, v in kwargs.items()}}
        self.metrics.append(row)
        with open(self.csv_path, "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(row.keys()))
            if not self._csv_header_written:
                writer.writeheader()
                self._csv_header_written = True
            writer.writerow(row)

    def save_json(self):
        with open(self.json_path, "w") as f:
            json.dump(self.metrics, f, indent=2)
        return str(self.json_path)

    # ---------- plotting ----------
    def plot_history(self, history, key="loss", tag="run", subdir="plots"):
        """
        Saves the curve of history[key] as <key>_curve_<tag>_epochs_<n>.png.
        Returns the written path, or None when there is nothing to plot.
        """
        values = history.get(key, [])
        if len(values) == 0:
            return None
        outdir = self.dir / subdir
        outdir.mkdir(parents=True, exist_ok=True)
        path = outdir / f"{key}_curve_{tag}_epochs_{len(values)}.png"
        plt.figure()
        plt.plot(values, label=key)
        plt.xlabel("Epoch")
        plt.ylabel(key)
        plt.title(f"{key} vs Epochs ({tag})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(path, dpi=160)
        plt.close()
        return str(path)
