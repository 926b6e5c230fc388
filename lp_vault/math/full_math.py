"""
정수 나눗셈 헬퍼 (올림)

Solidity FullMath / UnsafeMath의 올림 나눗셈과 동일한 결과.
"""


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """(a * b) / denominator 올림"""
    result, remainder = divmod(a * b, denominator)
    return result + 1 if remainder > 0 else result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """numerator / denominator 올림"""
    result, remainder = divmod(numerator, denominator)
    return result + 1 if remainder > 0 else result
