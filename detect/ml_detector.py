"""ML detector using OpenCV DNN with YOLO-style outputs."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from contracts import BoundingBox, Detection, Frame
from detect.detector import Detector
from exceptions import ModelInferenceError, ModelLoadError
from log_config.logger import get_logger

logger = get_logger(__name__)

COCO_LABELS: Tuple[str, ...] = (
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck",
    "boat", "traffic light", "fire hydrant", "stop sign", "parking meter", "bench",
    "bird", "cat", "dog", "horse", "sheep", "cow", "elephant", "bear", "zebra",
    "giraffe", "backpack", "umbrella", "handbag", "tie", "suitcase", "frisbee",
    "skis", "snowboard", "sports ball", "kite", "baseball bat", "baseball glove",
    "skateboard", "surfboard", "tennis racket", "bottle", "wine glass", "cup",
    "fork", "knife", "spoon", "bowl", "banana", "apple", "sandwich", "orange",
    "broccoli", "carrot", "hot dog", "pizza", "donut", "cake", "chair", "couch",
    "potted plant", "bed", "dining table", "toilet", "tv", "laptop", "mouse",
    "remote", "keyboard", "cell phone", "microwave", "oven", "toaster", "sink",
    "refrigerator", "book", "clock", "vase", "scissors", "teddy bear",
    "hair drier", "toothbrush",
)


class MlDetector(Detector):
    """YOLO ONNX model run through ``cv2.dnn``.

    Frames are scale-filled to the model input (no crop, no letterbox), so a
    box normalized in model space is already normalized in frame space.
    """

    def __init__(
        self,
        model_path: Optional[str] = None,
        input_size: Tuple[int, int] = (640, 640),
        conf_threshold: float = 0.25,
        nms_threshold: float = 0.45,
        output_format: str = "yolo_v5",
        labels: Sequence[str] = COCO_LABELS,
    ) -> None:
        self.model_path = model_path
        self.input_size = input_size
        self.conf_threshold = conf_threshold
        self.nms_threshold = nms_threshold
        self.output_format = output_format
        self.labels = tuple(labels)
        self._net: Optional[cv2.dnn.Net] = None

    def _load_net(self) -> Optional[cv2.dnn.Net]:
        if self.model_path is None:
            return None
        if self._net is None:
            try:
                self._net = cv2.dnn.readNetFromONNX(self.model_path)
            except cv2.error as e:
                logger.error(f"Failed to load model {self.model_path}: {e}")
                raise ModelLoadError(f"Failed to load model {self.model_path}: {e}") from e
            logger.info(f"Loaded detection model {self.model_path} ({self.output_format})")
        return self._net

    def detect(self, frame: Frame) -> List[Detection]:
        net = self._load_net()
        if net is None:
            return []
        try:
            blob = cv2.dnn.blobFromImage(
                frame.image,
                scalefactor=1 / 255.0,
                size=self.input_size,
                swapRB=True,
                crop=False,
            )
            net.setInput(blob)
            outputs = net.forward()
        except cv2.error as e:
            raise ModelInferenceError(f"Inference failed on frame {frame.frame_index}: {e}") from e
        return parse_outputs(
            outputs=outputs,
            input_size=self.input_size,
            conf_threshold=self.conf_threshold,
            nms_threshold=self.nms_threshold,
            output_format=self.output_format,
            labels=self.labels,
        )


def parse_outputs(
    outputs: np.ndarray,
    input_size: Tuple[int, int],
    conf_threshold: float,
    nms_threshold: float,
    output_format: str = "yolo_v5",
    labels: Sequence[str] = COCO_LABELS,
) -> List[Detection]:
    """Decode raw YOLO rows into normalized detections, highest confidence first."""
    output = outputs
    if isinstance(outputs, (list, tuple)):
        output = outputs[0]
    output = np.asarray(output)
    if output.ndim == 3:
        output = output[0]
    if output_format == "yolo_v8" and output.shape[0] < output.shape[1]:
        # (4 + classes, anchors) -> (anchors, 4 + classes)
        output = output.T

    input_w, input_h = input_size
    boxes: List[List[int]] = []
    confidences: List[float] = []
    candidates: List[Tuple[int, BoundingBox]] = []
    for row in output:
        if output_format == "yolo_v5":
            obj_conf = float(row[4])
            if obj_conf < conf_threshold:
                continue
            scores = row[5:]
            best_class = int(np.argmax(scores))
            conf = obj_conf * float(scores[best_class])
        else:
            scores = row[4:]
            best_class = int(np.argmax(scores))
            conf = float(scores[best_class])
        if conf < conf_threshold:
            continue
        cx, cy, w, h = (float(v) for v in row[0:4])
        if max(cx, cy, w, h) > 1.5:
            # Pixel units in model input space
            cx /= input_w
            cy /= input_h
            w /= input_w
            h /= input_h
        box = BoundingBox.from_center(cx, cy, w, h)
        boxes.append(
            [
                int(box.min_x * input_w),
                int(box.min_y * input_h),
                int(box.width * input_w),
                int(box.height * input_h),
            ]
        )
        confidences.append(conf)
        candidates.append((best_class, box))

    detections: List[Detection] = []
    if not boxes:
        return detections
    indices = cv2.dnn.NMSBoxes(boxes, confidences, conf_threshold, nms_threshold)
    if len(indices) == 0:
        return detections
    for idx in np.asarray(indices).reshape(-1):
        i = int(idx)
        class_id, box = candidates[i]
        label = labels[class_id] if class_id < len(labels) else str(class_id)
        detections.append(Detection(label=label, confidence=float(confidences[i]), box=box))
    detections.sort(key=lambda det: det.confidence, reverse=True)
    return detections
