"""Note value constants.

All values are exact ``fractions.Fraction`` objects measured in **whole notes**,
so ``QUARTER == Fraction(1, 4)``. Durations stay rational all the way through
performance; only the renderer converts them to seconds.

Multiply by a count for multi-note durations::

    import euterpe.constants.durations as dur

    length = 3 * dur.EIGHTH       # Fraction(3, 8)
"""

import fractions


ZERO = fractions.Fraction(0)

BREVIS = fractions.Fraction(2)
WHOLE = fractions.Fraction(1)
HALF = fractions.Fraction(1, 2)
QUARTER = fractions.Fraction(1, 4)
EIGHTH = fractions.Fraction(1, 8)
SIXTEENTH = fractions.Fraction(1, 16)
THIRTYSECOND = fractions.Fraction(1, 32)
SIXTYFOURTH = fractions.Fraction(1, 64)

DOTTED_WHOLE = fractions.Fraction(3, 2)
DOTTED_HALF = fractions.Fraction(3, 4)
DOTTED_QUARTER = fractions.Fraction(3, 8)
DOTTED_EIGHTH = fractions.Fraction(3, 16)
DOTTED_SIXTEENTH = fractions.Fraction(3, 32)
DOTTED_THIRTYSECOND = fractions.Fraction(3, 64)

DOUBLE_DOTTED_HALF = fractions.Fraction(7, 8)
DOUBLE_DOTTED_QUARTER = fractions.Fraction(7, 16)
DOUBLE_DOTTED_EIGHTH = fractions.Fraction(7, 32)

TRIPLET_EIGHTH = fractions.Fraction(1, 12)
TRIPLET_QUARTER = fractions.Fraction(1, 6)
