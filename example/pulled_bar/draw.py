"""
Energy history of the pulled bar example.
"""

import os
import pickle

import matplotlib.pyplot as plt
import numpy as np

results_dir = "resultats"


def load_result(file_path):
    with open(file_path, 'rb') as fid:
        return pickle.load(fid)


def main():
    history = load_result(os.path.join(results_dir, "history.pkl"))
    t = np.asarray(history["time"]) * 1e3

    fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True, figsize=(7, 6))
    ax1.plot(t, history["kinetic"], label="kinetic")
    ax1.plot(t, history["potential"], label="potential")
    ax1.plot(t, np.add(history["kinetic"], history["potential"]), "k--", label="total")
    ax1.set_ylabel("Energy (J)")
    ax1.legend()

    ax2.step(t, history["broken"], where="post", label="broken bonds")
    ax2.plot(t, history["iterations"], ".", markersize=2, label="coupling iterations")
    ax2.set_xlabel("t (ms)")
    ax2.legend()

    fig.tight_layout()
    fig.savefig(os.path.join(results_dir, "energy.png"), dpi=200)
    plt.show()


if __name__ == '__main__':
    main()
