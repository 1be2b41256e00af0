import os

import cv2
import numpy as np
import matplotlib.pyplot as plt

HEADER_HEIGHT = 60


def _scaler(nodes, width, height, margin):
    xs = [n.x for n in nodes]
    ys = [n.y for n in nodes]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    sx = (width - 2 * margin) / max(max_x - min_x, 1)
    sy = (height - 2 * margin) / max(max_y - min_y, 1)

    def scale(node):
        x = int((node.x - min_x) * sx + margin)
        y = height - int((node.y - min_y) * sy + margin)  # image y grows downwards
        return x, y

    return scale


def draw_tour(nodes, tour_nodes, lines=(), title=None, width=1000, height=800, margin=40):
    """Render all nodes in grey and the tour in red under a black header.

    The header holds up to two ``lines`` on the left and ``title`` on the right.
    """
    img = np.full((height + HEADER_HEIGHT, width, 3), 255, dtype=np.uint8)
    img[:HEADER_HEIGHT] = 0
    font = cv2.FONT_HERSHEY_SIMPLEX
    for i, text in enumerate(list(lines)[:2]):
        cv2.putText(img, str(text), (10, 22 + 22 * i), font, 0.6, (255, 255, 255), 1)
    if title:
        (text_w, _), _ = cv2.getTextSize(title, font, 0.6, 1)
        cv2.putText(img, title, (width - text_w - 10, 22), font, 0.6, (255, 255, 255), 1)

    if not nodes:
        return img
    scale = _scaler(nodes, width, height, margin)
    by_id = {n.id: n for n in nodes}
    canvas = img[HEADER_HEIGHT:]

    for node in nodes:
        cv2.circle(canvas, scale(node), 4, (160, 160, 160), -1)

    for a, b in zip(tour_nodes, tour_nodes[1:]):
        cv2.line(canvas, scale(by_id[a]), scale(by_id[b]), (0, 0, 220), 2)
    for node_id in tour_nodes:
        cv2.circle(canvas, scale(by_id[node_id]), 5, (0, 0, 220), -1)
    return img


def solution_lines(solution):
    return [f"Total distance: {solution.distance}  cost: {solution.cost}",
            f"Score: {solution.score}"]


def save_tour_image(path, nodes, solution):
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    img = draw_tour(nodes, solution.nodes, solution_lines(solution), title=solution.method)
    if not cv2.imwrite(path, img):
        raise RuntimeError(f"Could not write image to {path}")
    return img


def plot_tour(nodes, tour_nodes, title="Best tour", show=True):
    """Plot nodes coloured by visiting cost with the tour drawn over them."""
    fig, ax = plt.subplots(figsize=(10, 8))
    by_id = {n.id: n for n in nodes}
    sc = ax.scatter([n.x for n in nodes], [n.y for n in nodes],
                    c=[n.cost for n in nodes], cmap="viridis", s=25, zorder=2)
    fig.colorbar(sc, ax=ax, label="Visiting cost")

    xs = [by_id[i].x for i in tour_nodes]
    ys = [by_id[i].y for i in tour_nodes]
    ax.plot(xs, ys, "r-", linewidth=1.2, zorder=1)
    ax.set_title(title)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    plt.tight_layout()
    if show:
        plt.show()
    return fig
