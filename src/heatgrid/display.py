"""
Matplotlib window for the coordinator worker.

Imported only when a window is requested, so headless ranks never load pyplot.
"""
import matplotlib.pyplot as plt
import numpy as np

from heatgrid.sink import GridSink


def to_rgb(grid: np.ndarray) -> np.ndarray:
    """
    Map temperatures to a blue (cold) to red (hot) gradient.

    red = 255*v, green = 0, blue = 255*(1-v). Overshoot outside [0, 1] is
    clipped for rendering only.
    """
    intensity = np.clip(255.0 * grid, 0.0, 255.0)
    rgb = np.zeros(grid.shape + (3,), dtype=np.uint8)
    rgb[..., 0] = intensity.astype(np.uint8)
    rgb[..., 2] = (255.0 - intensity).astype(np.uint8)
    return rgb


class GridDisplay(GridSink):
    """
    One pixel per cell in a matplotlib window.

    The row index runs along x and the column index along y, as in a
    point-per-cell plot of grid[x][y].
    """
    def __init__(self, title: str = "Heat Transfer", pause: float = 0.001):
        self.pause = pause
        self.fig, self.ax = plt.subplots(figsize=(6, 6))
        if self.fig.canvas.manager is not None:
            self.fig.canvas.manager.set_window_title(title)
        self.ax.set_axis_off()
        self._image = None

    def show(self, grid: np.ndarray, step: int) -> None:
        rgb = to_rgb(grid).transpose(1, 0, 2)
        if self._image is None:
            self._image = self.ax.imshow(rgb, origin="upper", interpolation="nearest")
        else:
            self._image.set_data(rgb)
        self.ax.set_title(f"Step {step}")
        plt.pause(self.pause)

    def wait_for_quit(self, poll: float = 0.1) -> None:
        """Block until 'q' is pressed or the window is closed"""
        pressed = []

        def on_key(event):
            if event.key == "q":
                pressed.append(True)

        cid = self.fig.canvas.mpl_connect("key_press_event", on_key)
        while not pressed and plt.fignum_exists(self.fig.number):
            plt.pause(poll)
        self.fig.canvas.mpl_disconnect(cid)
        plt.close(self.fig)

    def finish(self) -> None:
        self.wait_for_quit()
