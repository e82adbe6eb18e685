import warnings
from typing import Literal

import numpy as np

DegenerateInputHint = Literal["skip", "warn", "raise"]


class DegenerateInputError(ValueError):
    """Error raised when an accelerometer sample can not be used for the correction and the policy is "raise".

    This is the case for samples with zero magnitude and for samples that point exactly opposite to the estimated
    gravity direction, where the gradient of the correction vanishes.
    """


class DegenerateOrientationError(ValueError):
    """Error raised when the integrated quaternion has zero magnitude and can not be normalized."""


def _check_degenerate_hint(degenerate_hint: DegenerateInputHint) -> None:
    if degenerate_hint not in ["skip", "warn", "raise"]:
        raise ValueError('"degenerate_acc" must be set to "skip", "warn" or "raise"!')


def _handle_degenerate_acc(
    is_degenerate: np.ndarray,
    degenerate_hint: DegenerateInputHint,
    caller_fct_name: str,
    stacklevel: int = 2,
) -> None:
    """Apply the selected policy to the samples flagged as degenerate by the filter update.

    ``stacklevel`` follows :func:`warnings.warn`, counted from the caller of this function.
    """
    _check_degenerate_hint(degenerate_hint)
    n_degenerate = int(np.sum(is_degenerate))
    if n_degenerate == 0:
        return
    msg = (
        f"{n_degenerate} accelerometer sample(s) passed to {caller_fct_name} have zero magnitude or point opposite "
        "to the estimated gravity direction."
    )
    if degenerate_hint == "raise":
        raise DegenerateInputError(f"{msg} The gravity direction can not be corrected from them.")
    if degenerate_hint == "warn":
        warnings.warn(
            f"{msg} For these samples, only the gyroscope data is integrated.",
            UserWarning,
            stacklevel=stacklevel + 1,
        )
