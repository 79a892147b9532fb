# src/bootloss/losses/reductions.py


def normalizer(normalize: bool, valid_count: int, outer_num: int) -> float:
    """
    Divisor applied to a summed per-position loss and to its gradient.

    normalize=True  divides by the number of non-ignored positions
    normalize=False divides by the outer extent (batch size)
    Either way the divisor is at least 1, so an all-ignored batch gives 0, not nan.
    """
    denom = valid_count if normalize else outer_num
    return float(max(1, denom))
