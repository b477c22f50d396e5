"""
Static copper cable reference data (BS 7671 Appendix 4 / IEC 60364-5-52).

Tree layout:

    TABLES[insulation][armour][arrangement]['ccc'][method path...][conductors][size] → A
    TABLES[insulation][armour][arrangement]['voltageDrop'][path...][size] → {r, x, z}

insulation:  'pvc' (70 °C) | 'xlpe' (90 °C)
armour:      'non_armoured' | 'armoured'
arrangement: 'multicore' | 'single_core'

Voltage-drop entries are mV/A/m per circuit. Sizes up to 16 mm² carry
only the resistive component; larger sizes carry r, x and z.

Values are representative of the published tables for copper
conductors. Verify against the current edition before use on a project.
"""

import math
from typing import Dict, List, Optional

SIZES = [1.5, 2.5, 4, 6, 10, 16, 25, 35, 50, 70, 95, 120, 150, 185, 240, 300]


def _row(values: List[float], start: float = 1.5) -> Dict[float, float]:
    """Map a column of values onto SIZES, beginning at `start` mm²."""
    sizes = SIZES[SIZES.index(start):]
    if len(values) != len(sizes):
        raise ValueError(f"Column starting at {start} mm² needs {len(sizes)} values, got {len(values)}")
    return dict(zip(sizes, values))


def _vd(r_values: List[float], x_values: Optional[List[float]] = None, start: float = 1.5) -> Dict[float, Dict]:
    """Voltage-drop column; reactance (if given) aligns with the largest sizes."""
    column = {}
    r_col = _row(r_values, start)
    offset = len(r_values) - len(x_values or [])
    for i, (size, r) in enumerate(r_col.items()):
        if x_values and i >= offset:
            x = x_values[i - offset]
            column[size] = {'r': r, 'x': x, 'z': round(math.hypot(r, x), 3)}
        else:
            column[size] = {'r': r}
    return column


# --- Voltage drop building blocks (mV/A/m) ---

_R2_PVC = [29, 18, 11, 7.3, 4.4, 2.8, 1.75, 1.25, 0.93, 0.63, 0.46, 0.36, 0.29, 0.23, 0.180, 0.145]
_R3_PVC = [25, 15, 9.5, 6.4, 3.8, 2.4, 1.50, 1.10, 0.80, 0.55, 0.41, 0.33, 0.26, 0.21, 0.165, 0.135]
_R2_XLPE = [31, 19, 12, 7.9, 4.7, 2.9, 1.85, 1.35, 0.98, 0.67, 0.49, 0.39, 0.31, 0.25, 0.195, 0.155]
_R3_XLPE = [27, 16, 10, 6.8, 4.0, 2.5, 1.60, 1.15, 0.86, 0.59, 0.43, 0.34, 0.27, 0.22, 0.170, 0.135]

# Reactance from 25 mm² upward
_X2_MULTICORE = [0.170, 0.165, 0.165, 0.160, 0.155, 0.155, 0.155, 0.150, 0.150, 0.145]
_X3_MULTICORE = [0.145, 0.145, 0.140, 0.140, 0.135, 0.135, 0.130, 0.130, 0.130, 0.130]
_X2_ENCLOSED = [0.29, 0.28, 0.28, 0.27, 0.27, 0.26, 0.26, 0.26, 0.26, 0.26]
_X3_ENCLOSED = [0.25, 0.24, 0.24, 0.24, 0.23, 0.23, 0.23, 0.23, 0.23, 0.23]
_X2_TOUCHING = [0.200, 0.195, 0.190, 0.185, 0.185, 0.180, 0.180, 0.180, 0.175, 0.175]
_X3_TREFOIL = [0.175, 0.170, 0.165, 0.160, 0.160, 0.155, 0.155, 0.155, 0.150, 0.150]
_X3_FLAT = [0.250, 0.240, 0.240, 0.235, 0.230, 0.230, 0.230, 0.225, 0.225, 0.220]
_X2_SPACED = [0.28, 0.27, 0.27, 0.26, 0.26, 0.26, 0.26, 0.26, 0.25, 0.25]
_X3_SPACED = [0.29, 0.29, 0.28, 0.28, 0.27, 0.27, 0.27, 0.27, 0.26, 0.26]

# Armoured single-core cables are only tabulated from 50 mm²
_ARMOURED_START = 50
_A = SIZES.index(_ARMOURED_START)


def _multicore_vd(r2: List[float], r3: List[float]) -> Dict:
    return {
        'ac': {
            '2': _vd(r2, _X2_MULTICORE),
            '3_4': _vd(r3, _X3_MULTICORE),
        },
        'dc': _vd(r2),
    }


def _single_core_vd(r2: List[float], r3: List[float], c_group: str) -> Dict:
    return {
        'methodAB': {
            '2': _vd(r2, _X2_ENCLOSED),
            '3': _vd(r3, _X3_ENCLOSED),
        },
        c_group: {
            'touching': {
                'cables_touching': _vd(r2, _X2_TOUCHING),
                'flat': _vd(r3, _X3_FLAT),
                'trefoil': _vd(r3, _X3_TREFOIL),
            },
            'spaced': {
                'flat_2': _vd(r2, _X2_SPACED),
                'flat_3': _vd(r3, _X3_SPACED),
            },
        },
        'dc': _vd(r2),
    }


def _armoured_single_core_vd(r2: List[float], r3: List[float]) -> Dict:
    x_skip = _A - (len(SIZES) - len(_X2_TOUCHING))
    return {
        'single_phase': {
            'touching': _vd(r2[_A:], _X2_TOUCHING[x_skip:], start=_ARMOURED_START),
            'spaced': _vd(r2[_A:], _X2_SPACED[x_skip:], start=_ARMOURED_START),
        },
        'three_phase': {
            'trefoil': _vd(r3[_A:], _X3_TREFOIL[x_skip:], start=_ARMOURED_START),
            'flat_touching': _vd(r3[_A:], _X3_FLAT[x_skip:], start=_ARMOURED_START),
            'flat_spaced': _vd(r3[_A:], _X3_SPACED[x_skip:], start=_ARMOURED_START),
        },
        'dc': _vd(r2[_A:], start=_ARMOURED_START),
    }


TABLES = {
    'pvc': {
        'non_armoured': {
            'multicore': {
                'ccc': {
                    'methodA': {
                        '2': _row([14, 18.5, 25, 32, 43, 57, 75, 92, 110, 139, 167, 192, 219, 248, 291, 334]),
                        '3_4': _row([13, 17.5, 23, 29, 39, 52, 68, 83, 99, 125, 150, 172, 196, 223, 261, 298]),
                    },
                    'methodB': {
                        '2': _row([16.5, 23, 30, 38, 52, 69, 90, 111, 133, 168, 201, 232, 258, 294, 344, 394]),
                        '3_4': _row([15, 20, 27, 34, 46, 62, 80, 99, 118, 149, 179, 206, 225, 255, 297, 339]),
                    },
                    'methodC': {
                        '2': _row([19.5, 27, 36, 46, 63, 85, 112, 138, 168, 213, 258, 299, 344, 392, 461, 530]),
                        '3_4': _row([17.5, 24, 32, 41, 57, 76, 96, 119, 144, 184, 223, 259, 299, 341, 403, 464]),
                    },
                    'methodE': {
                        '2': _row([22, 30, 40, 51, 70, 94, 119, 148, 180, 232, 282, 328, 379, 434, 514, 593]),
                        '3_4': _row([18.5, 25, 34, 43, 60, 80, 101, 126, 153, 196, 238, 276, 319, 364, 430, 497]),
                    },
                },
                'voltageDrop': _multicore_vd(_R2_PVC, _R3_PVC),
            },
            'single_core': {
                'ccc': {
                    'methodA': {
                        '2': _row([14.5, 19.5, 26, 34, 46, 61, 80, 99, 119, 151, 182, 210, 240, 273, 321, 367]),
                        '3': _row([13.5, 18, 24, 31, 42, 56, 73, 89, 108, 136, 164, 188, 216, 245, 286, 328]),
                    },
                    'methodB': {
                        '2': _row([17.5, 24, 32, 41, 57, 76, 101, 125, 151, 192, 232, 269, 300, 341, 400, 458]),
                        '3': _row([15.5, 21, 28, 36, 50, 68, 89, 110, 134, 171, 207, 239, 262, 296, 346, 394]),
                    },
                    'methodC': {
                        '2': _row([20, 27, 37, 47, 65, 87, 114, 141, 182, 234, 284, 330, 381, 436, 515, 594]),
                        '3': _row([17.5, 24, 32, 41, 57, 76, 102, 126, 153, 196, 238, 276, 319, 364, 430, 497]),
                    },
                    'methodF': {
                        'touching': {
                            'flat': _row([131, 162, 196, 251, 304, 352, 406, 463, 546, 629], start=25),
                            'flat_3ph': _row([114, 143, 174, 225, 275, 321, 372, 427, 507, 587], start=25),
                            'trefoil': _row([110, 137, 167, 216, 264, 308, 356, 409, 485, 561], start=25),
                        },
                        'spaced': {
                            'horizontal': _row([146, 181, 219, 281, 341, 396, 456, 521, 615, 709], start=25),
                            'vertical': _row([130, 162, 197, 254, 311, 362, 419, 480, 569, 659], start=25),
                        },
                    },
                },
                'voltageDrop': _single_core_vd(_R2_PVC, _R3_PVC, 'methodCF'),
            },
        },
        'armoured': {
            'multicore': {
                'ccc': {
                    'methodC': {
                        '2': _row([21, 28, 38, 49, 67, 89, 118, 145, 175, 222, 269, 310, 356, 405, 476, 547]),
                        '3_4': _row([18, 25, 33, 42, 58, 77, 102, 125, 151, 192, 231, 267, 306, 348, 409, 469]),
                    },
                    'methodE': {
                        '2': _row([22, 31, 41, 53, 72, 97, 128, 157, 190, 241, 291, 336, 386, 439, 516, 592]),
                        '3_4': _row([19, 26, 35, 45, 62, 83, 110, 135, 163, 207, 251, 290, 332, 378, 445, 510]),
                    },
                },
                'voltageDrop': _multicore_vd(_R2_PVC, _R3_PVC),
            },
            'single_core': {
                'ccc': {
                    'methodC': {
                        '2': _row([193, 245, 296, 342, 393, 447, 525, 594], start=50),
                        '3': _row([179, 225, 269, 309, 352, 399, 465, 515], start=50),
                    },
                    'methodF': {
                        'touching': {
                            '2': _row([205, 259, 313, 360, 413, 469, 550, 624], start=50),
                            '3_flat': _row([189, 238, 285, 327, 373, 422, 492, 550], start=50),
                            '3_trefoil': _row([184, 233, 281, 323, 371, 420, 491, 553], start=50),
                        },
                        'spaced': {
                            'ac_2_horizontal': _row([229, 287, 349, 401, 449, 511, 593, 668], start=50),
                            'ac_2_vertical': _row([212, 268, 326, 376, 421, 480, 560, 631], start=50),
                            'ac_3_horizontal': _row([216, 272, 326, 374, 420, 476, 549, 614], start=50),
                            'ac_3_vertical': _row([199, 251, 302, 347, 391, 445, 515, 578], start=50),
                            'dc_horizontal': _row([247, 315, 385, 447, 511, 587, 691, 794], start=50),
                            'dc_vertical': _row([230, 294, 361, 420, 481, 553, 652, 750], start=50),
                        },
                    },
                },
                'voltageDrop': _armoured_single_core_vd(_R2_PVC, _R3_PVC),
            },
        },
    },
    'xlpe': {
        'non_armoured': {
            'multicore': {
                'ccc': {
                    'methodA': {
                        '2': _row([18.5, 25, 33, 42, 57, 76, 99, 121, 145, 183, 220, 253, 290, 329, 386, 442]),
                        '3_4': _row([16.5, 22, 30, 38, 51, 68, 89, 109, 130, 164, 197, 227, 259, 295, 346, 396]),
                    },
                    'methodB': {
                        '2': _row([22, 30, 40, 51, 69, 91, 119, 146, 175, 221, 265, 305, 334, 384, 459, 532]),
                        '3_4': _row([19.5, 26, 35, 44, 60, 80, 105, 128, 154, 194, 233, 268, 300, 340, 398, 455]),
                    },
                    'methodC': {
                        '2': _row([27, 36, 49, 62, 85, 110, 146, 180, 219, 279, 338, 392, 451, 515, 607, 698]),
                        '3_4': _row([23, 32, 42, 54, 75, 100, 127, 158, 192, 246, 298, 346, 399, 456, 538, 621]),
                    },
                    'methodE': {
                        '2': _row([29, 39, 52, 66, 90, 121, 160, 197, 240, 307, 375, 437, 505, 579, 687, 793]),
                        '3_4': _row([25, 34, 45, 58, 80, 107, 138, 171, 209, 269, 328, 382, 441, 506, 599, 693]),
                    },
                },
                'voltageDrop': _multicore_vd(_R2_XLPE, _R3_XLPE),
            },
            'single_core': {
                'ccc': {
                    'methodA': {
                        '2': _row([19, 26, 35, 45, 61, 81, 106, 131, 158, 200, 241, 278, 318, 362, 424, 486]),
                        '3': _row([17, 23, 31, 40, 54, 73, 95, 117, 141, 179, 216, 249, 285, 324, 380, 435]),
                    },
                    'methodB': {
                        '2': _row([23, 31, 42, 54, 75, 100, 133, 164, 198, 253, 306, 354, 393, 449, 528, 603]),
                        '3': _row([20, 28, 37, 48, 66, 88, 117, 144, 175, 222, 269, 312, 342, 384, 450, 514]),
                    },
                    'methodC': {
                        '2': _row([25, 34, 46, 59, 81, 109, 143, 176, 228, 293, 355, 413, 476, 545, 644, 743]),
                        '3': _row([22, 30, 40, 52, 71, 96, 127, 157, 190, 242, 293, 339, 391, 447, 528, 610]),
                    },
                    'methodF': {
                        'touching': {
                            'flat': _row([161, 200, 242, 310, 377, 437, 504, 575, 679, 783], start=25),
                            'flat_3ph': _row([141, 176, 216, 279, 342, 400, 464, 533, 634, 736], start=25),
                            'trefoil': _row([135, 169, 207, 268, 328, 383, 444, 510, 607, 703], start=25),
                        },
                        'spaced': {
                            'horizontal': _row([182, 226, 275, 353, 430, 500, 577, 661, 781, 902], start=25),
                            'vertical': _row([161, 201, 246, 318, 389, 454, 527, 605, 719, 833], start=25),
                        },
                    },
                    'methodG': {
                        'spaced': {
                            'horizontal': _row([208, 258, 315, 404, 493, 574, 664, 761, 901, 1042], start=25),
                            'vertical': _row([182, 226, 275, 353, 431, 501, 580, 666, 790, 915], start=25),
                        },
                    },
                },
                'voltageDrop': _single_core_vd(_R2_XLPE, _R3_XLPE, 'methodCFG'),
            },
        },
        'armoured': {
            'multicore': {
                'ccc': {
                    'methodC': {
                        '2': _row([27, 36, 49, 62, 85, 110, 146, 180, 219, 279, 338, 392, 451, 515, 607, 698]),
                        '3_4': _row([23, 31, 41, 53, 73, 97, 126, 156, 190, 245, 298, 346, 400, 458, 542, 625]),
                    },
                    'methodE': {
                        '2': _row([29, 39, 52, 66, 90, 115, 152, 188, 228, 291, 354, 410, 472, 539, 636, 732]),
                        '3_4': _row([25, 33, 44, 56, 78, 99, 131, 162, 197, 251, 304, 353, 406, 463, 546, 628]),
                    },
                },
                'voltageDrop': _multicore_vd(_R2_XLPE, _R3_XLPE),
            },
            'single_core': {
                'ccc': {
                    'methodC': {
                        '2': _row([237, 303, 367, 425, 488, 557, 656, 755], start=50),
                        '3': _row([220, 277, 333, 383, 437, 496, 579, 662], start=50),
                    },
                    'methodF': {
                        'touching': {
                            '2': _row([253, 322, 389, 449, 516, 587, 689, 788], start=50),
                            '3_flat': _row([232, 293, 352, 405, 462, 524, 610, 695], start=50),
                            '3_trefoil': _row([226, 287, 347, 401, 460, 524, 615, 705], start=50),
                        },
                        'spaced': {
                            'ac_2_horizontal': _row([282, 357, 431, 497, 566, 643, 749, 852], start=50),
                            'ac_2_vertical': _row([261, 332, 401, 464, 530, 604, 706, 805], start=50),
                            'ac_3_horizontal': _row([266, 336, 404, 465, 529, 600, 698, 793], start=50),
                            'ac_3_vertical': _row([245, 311, 375, 433, 494, 562, 655, 746], start=50),
                            'dc_horizontal': _row([303, 387, 472, 549, 628, 721, 849, 976], start=50),
                            'dc_vertical': _row([283, 362, 443, 516, 592, 681, 803, 925], start=50),
                        },
                    },
                },
                'voltageDrop': _armoured_single_core_vd(_R2_XLPE, _R3_XLPE),
            },
        },
    },
}


# --- Rating factors ---

# Ambient temperature correction (Table 4B1): (max ambient °C, factor)
TEMPERATURE_FACTORS = {
    'pvc': [
        (10, 1.22), (15, 1.17), (20, 1.12), (25, 1.06), (30, 1.00),
        (35, 0.94), (40, 0.87), (45, 0.79), (50, 0.71), (55, 0.61),
    ],
    'xlpe': [
        (10, 1.15), (15, 1.12), (20, 1.08), (25, 1.04), (30, 1.00),
        (35, 0.96), (40, 0.91), (45, 0.87), (50, 0.82), (55, 0.76),
        (60, 0.71), (65, 0.65), (70, 0.58), (75, 0.50), (80, 0.41),
    ],
}

# Factor used above the last tabulated temperature
TEMPERATURE_FACTOR_ABOVE_RANGE = {
    'pvc': 0.50,
    'xlpe': 0.32,
}

# Grouping correction (Table 4C1): (max circuits, factor); above the last
# row the last factor applies.
GROUPING_FACTORS = {
    'enclosed': [
        (1, 1.00), (2, 0.80), (3, 0.70), (4, 0.65), (5, 0.60), (6, 0.57),
        (9, 0.54), (12, 0.52), (15, 0.50), (19, 0.48), (None, 0.45),
    ],
    'surface': [
        (1, 1.00), (2, 0.85), (3, 0.79), (4, 0.75), (5, 0.73), (6, 0.72),
        (9, 0.70), (None, 0.68),
    ],
    'tray': [
        (1, 1.00), (2, 0.88), (3, 0.82), (4, 0.77), (5, 0.75), (6, 0.73),
        (None, 0.70),
    ],
}

# Installation method → grouping factor table
GROUPING_GROUP = {
    'A': 'enclosed',
    'B': 'enclosed',
    'C': 'surface',
    'F_touching': 'surface',
    'E': 'tray',
    'F_spacedH': 'tray',
    'F_spacedV': 'tray',
    'G_spacedH': 'tray',
    'G_spacedV': 'tray',
}
