import matplotlib
matplotlib.use("Agg")

import cv2
import matplotlib.pyplot as plt
import numpy as np
import pytest
from models import Solution
from visualise import HEADER_HEIGHT, draw_tour, plot_tour, save_tour_image, solution_lines


@pytest.fixture
def solution():
    return Solution([0, 1, 2, 3, 0], distance=40, cost=0, method="test")


class TestDrawTour:
    def test_shape_and_header(self, square_nodes):
        img = draw_tour(square_nodes, [0, 1, 2, 3, 0], width=200, height=150)
        assert img.shape == (150 + HEADER_HEIGHT, 200, 3)
        assert img.dtype == np.uint8
        assert img[:HEADER_HEIGHT].max() == 0

    def test_header_text(self, square_nodes):
        img = draw_tour(square_nodes, [0, 1, 0], lines=["Score: 1"], title="test")
        assert img[:HEADER_HEIGHT].max() == 255

    def test_draws_tour_in_red(self, square_nodes):
        img = draw_tour(square_nodes, [0, 1, 2, 3, 0])
        canvas = img[HEADER_HEIGHT:]
        red = (canvas[:, :, 2] > 200) & (canvas[:, :, 0] < 50) & (canvas[:, :, 1] < 50)
        assert red.any()

    def test_no_nodes(self):
        img = draw_tour([], [], width=100, height=100)
        assert img[HEADER_HEIGHT:].min() == 255


def test_solution_lines(solution):
    lines = solution_lines(solution)
    assert lines[0] == "Total distance: 40  cost: 0"
    assert lines[1] == "Score: 40"


def test_save_tour_image(tmp_path, square_nodes, solution):
    path = tmp_path / "img" / "tour.png"
    save_tour_image(str(path), square_nodes, solution)
    img = cv2.imread(str(path))
    assert img is not None
    assert img.shape[0] == 800 + HEADER_HEIGHT


def test_plot_tour(square_nodes):
    fig = plot_tour(square_nodes, [0, 1, 2, 3, 0], title="square", show=False)
    assert fig.axes[0].get_title() == "square"
    plt.close(fig)
