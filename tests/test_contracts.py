from contracts import BoundingBox, Detection, DetectionResult, Frame, MotionStatus, select_target


def _detection(label: str, mid_x: float = 0.5, confidence: float = 0.9) -> Detection:
    return Detection(
        label=label,
        confidence=confidence,
        box=BoundingBox.from_center(mid_x, 0.5, 0.2, 0.4),
    )


def test_contracts_instantiation() -> None:
    frame = Frame(
        camera_id="0",
        frame_index=1,
        t_capture=12.5,
        image=None,
        width=1920,
        height=1080,
    )
    box = BoundingBox(min_x=0.25, min_y=0.5, width=0.5, height=0.25)
    status = MotionStatus(box=box, moving=True, timestamp=12.5)

    assert frame.camera_id == "0"
    assert status.magnitude is None
    assert box.max_x == 0.75
    assert box.max_y == 0.75
    assert box.mid_x == 0.5
    assert box.mid_y == 0.625


def test_bounding_box_from_center() -> None:
    box = BoundingBox.from_center(0.5, 0.5, 0.25, 0.5)

    assert box.min_x == 0.375
    assert box.min_y == 0.25
    assert box.mid_x == 0.5
    assert box.mid_y == 0.5


def test_select_target_returns_first_match() -> None:
    detections = [
        _detection("dog"),
        _detection("person", mid_x=0.2, confidence=0.6),
        _detection("person", mid_x=0.8, confidence=0.95),
    ]

    target = select_target(detections, "person")

    assert target is detections[1]


def test_select_target_without_match() -> None:
    assert select_target([_detection("car"), _detection("dog")], "person") is None
    assert select_target([], "person") is None


def test_detection_result_from_detections() -> None:
    result = DetectionResult.from_detections([_detection("cat"), _detection("person", mid_x=0.3)])
    empty = DetectionResult.from_detections([_detection("cat")])

    assert result.has_target
    assert result.target.label == "person"
    assert result.box.mid_x == result.target.box.mid_x
    assert not empty.has_target
    assert empty.box is None


def test_detection_result_custom_label() -> None:
    result = DetectionResult.from_detections([_detection("person"), _detection("dog")], target_label="dog")

    assert result.target.label == "dog"
