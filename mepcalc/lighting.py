"""
Lighting energy checks from the Building Energy Code (BEC).

- Minimum number of lighting control points (clause 5.5.2)
- Lighting power density compliance per space (Table 5.4)
"""

import math
from typing import Dict, List, Optional

from mepcalc.errors import InvalidInputError

# LPD below which large spaces may use fewer control points
LPD_REDUCTION_THRESHOLD = 7.8
REDUCTION_MIN_AREA = 200.0


def base_control_points(area: float) -> int:
    if area <= 150:
        return math.ceil(area / 15)
    if area <= 450:
        return math.ceil(area / 30 + 5)
    return math.ceil((area + 550) / 50)


def lighting_control_points(area: float, lpd: float) -> Dict:
    """
    Minimum lighting control points for a space.

    Spaces over 200 m² with an LPD below 7.8 W/m² may reduce the count
    in proportion to how far the LPD sits below that threshold.
    """
    if not math.isfinite(area) or area <= 0:
        raise InvalidInputError("Area must be a positive number")
    if not math.isfinite(lpd) or lpd < 0:
        raise InvalidInputError("LPD must be zero or a positive number")

    base = base_control_points(area)
    reduction_applies = area > REDUCTION_MIN_AREA and lpd < LPD_REDUCTION_THRESHOLD
    reduction_ratio = 0.0
    points = base
    if reduction_applies:
        reduction_ratio = (LPD_REDUCTION_THRESHOLD - lpd) / LPD_REDUCTION_THRESHOLD
        points = math.ceil(base * (1 - reduction_ratio))

    return {
        'area': area,
        'lpd': lpd,
        'base_points': base,
        'reduction_applies': reduction_applies,
        'reduction_ratio': reduction_ratio,
        'control_points': points,
    }


# key: (name, max LPD W/m², automatic control required)
_SPACE_TYPE_ROWS = {
    'activity_room': ('Activity Room / Children play area / Music Room / Recreational Facilities Room', 9.5, True),
    'atrium': ('Atrium / Foyer with headroom over 5m', 17.0, True),
    'babycare_room': ('Babycare Room / Breastfeeding Room / Lactation Room', 9.7, True),
    'bar_lounge': ('Bar / Lounge', 10.0, False),
    'banquet_room': ('Banquet Room / Function Room / Ball Room', 12.7, False),
    'canteen': ('Canteen', 9.5, False),
    'carpark': ('Car Park', 3.0, True),
    'changing_room': ('Changing Room / Locker Room', 8.1, True),
    'classroom': ('Classroom / Training Room', 9.1, True),
    'clinic': ('Clinic', 12.4, True),
    'common_room': ('Common Room / Break Room', 8.0, True),
    'computer_room': ('Computer Room / Data Centre', 12.5, True),
    'conference_room': ('Conference / Seminar Room', 10.6, True),
    'confinement_cell': ('Confinement Cell', 12.0, False),
    'copy_room': ('Copy / Printing Room, Photocopy Machine Room', 10.0, True),
    'corridor': ('Corridor', 6.0, False),
    'court_room': ('Court Room', 15.0, True),
    'covered_playground': ('Covered Playground (underneath building) / Sky Garden', 12.0, True),
    'dormitory': ('Dormitory', 6.1, True),
    'entrance_lobby': ('Entrance Lobby', 10.0, True),
    'exhibition_hall': ('Exhibition Hall / Gallery', 12.0, True),
    'fast_food': ('Fast Food / Food Court', 12.0, False),
    'guest_room': ('Guest room in Hotel or Guesthouse', 9.9, False),
    'gymnasium': ('Gymnasium / Exercise Room', 9.5, True),
    'indoor_pool': ('Indoor Swimming Pool, for recreational or leisure purposes', 15.0, False),
    'kitchen': ('Kitchen', 11.5, False),
    'laboratory': ('Laboratory', 10.4, False),
    'lecture_theatre': ('Lecture Theatre', 13.0, True),
    'library_reading': ('Library - Reading Area or Audio Visual Centre', 10.2, True),
    'library_stack': ('Library - Stack Area', 12.7, True),
    'lift_car': ('Lift Car', 11.0, True),
    'lift_lobby': ('Lift Lobby', 7.5, True),
    'loading_area': ('Loading & Unloading Area', 8.0, True),
    'long_stay_ward': ('Long Stay Ward for elderly', 12.9, False),
    'medical_room': ('Medical Examination Room', 12.3, False),
    'nurse_station': ('Nurse Station', 13.0, False),
    'office_small': ('Office, enclosed (with internal floor area at or below 15m²)', 9.0, True),
    'office_medium': ('Office, with internal floor area above 15m² and at or below 200m²', 8.5, True),
    'office_large': ('Office, with internal floor area above 200m²', 7.2, True),
    'pantry': ('Pantry', 8.5, True),
    'passenger_hall_low': ('Passenger Terminal - Arrival/Departure Hall, headroom ≤5m', 14.0, False),
    'passenger_hall_high': ('Passenger Terminal - Arrival/Departure Hall, headroom >5m', 18.0, False),
    'passenger_circulation': ('Passenger Terminal - Passenger circulation area', 13.0, False),
    'patient_ward': ('Patient Ward / Day Care', 11.2, False),
    'pharmacy': ('Pharmacy Area', 17.0, False),
    'plant_room_small': ('Plant Room / Machine Room / Switch Room (≤15m²)', 9.5, False),
    'plant_room_large': ('Plant Room / Machine Room / Switch Room (>15m²)', 8.4, False),
    'porte_cochere_low': ('Porte Cochere with headroom not exceeding 5m', 13.0, False),
    'porte_cochere_high': ('Porte Cochere with headroom over 5m', 15.0, False),
    'public_circulation': ('Public Circulation Area', 9.9, True),
    'railway_low': ('Railway Station - Concourse/Platform etc., headroom ≤5m', 14.0, False),
    'railway_high': ('Railway Station - Concourse/Platform etc., headroom >5m', 18.0, False),
    'refuge_floor': ('Refuge Floor', 11.0, True),
    'report_room': ('Report Room (Police Station)', 8.9, False),
    'restaurant': ('Restaurant', 12.0, False),
    'retail': ('Retail', 11.1, False),
    'school_hall': ('School hall', 12.5, True),
    'seating_area': ('Seating Area inside Theatre / Cinema / Auditorium / Concert Hall', 10.0, False),
    'security_room': ('Security Room / Guard Room', 9.0, False),
    'spa_room': ('Spa Room / Massage Room', 13.0, False),
    'server_room': ('Server Room / Hub Room', 8.2, False),
    'sports_arena_small': ('Sports Arena, Indoor, for recreational purpose (≤1,000m²)', 16.0, True),
    'sports_arena_large': ('Sports Arena, Indoor, for recreational purpose (>1,000m²)', 17.0, True),
    'staircase': ('Staircase', 5.6, False),
    'storeroom_small': ('Storeroom / Cleaner (with internal floor area ≤15m²)', 7.4, True),
    'storeroom_large': ('Storeroom / Cleaner (with internal floor area >15m²)', 6.3, True),
    'toilet': ('Toilet / Washroom / Shower Room', 9.0, True),
    'workshop': ('Workshop', 9.4, False),
    'multi_purpose': ('Multi-functional Space (Custom)', 0, False),
}

SPACE_TYPES = {
    key: {'name': name, 'max_lpd': float(max_lpd), 'automatic_control_required': control}
    for key, (name, max_lpd, control) in _SPACE_TYPE_ROWS.items()
}

# Custom spaces have no tabulated limit
CUSTOM_SPACE_TYPE = 'multi_purpose'


def calculate_lpd(spaces: List[Dict], luminaires: List[Dict]) -> Dict:
    """
    LPD and compliance for each space.

    Args:
        spaces: [{'id', 'name', 'type', 'area', 'luminaires': [{'luminaire_id', 'quantity'}]}]
        luminaires: [{'id', 'name', 'wattage'}]

    Returns:
        Dict with per-space results keyed by space id, and overall
        compliance. Custom spaces report compliant=None and do not count
        against overall compliance.
    """
    catalogue = {}
    for lum in luminaires:
        wattage = lum.get('wattage')
        if wattage is None or not math.isfinite(wattage) or wattage < 0:
            raise InvalidInputError(f"Luminaire '{lum.get('name', lum.get('id'))}' needs a non-negative wattage")
        catalogue[lum['id']] = lum

    results = {}
    for space in spaces:
        space_type = SPACE_TYPES.get(space.get('type'))
        if space_type is None:
            raise InvalidInputError(f"Unknown space type '{space.get('type')}'")
        area = space.get('area')
        if area is None or not math.isfinite(area) or area <= 0:
            raise InvalidInputError(f"Space '{space.get('name')}' needs a positive area")

        total = 0.0
        for item in space.get('luminaires', []):
            lum = catalogue.get(item['luminaire_id'])
            if lum is None:
                raise InvalidInputError(
                    f"Space '{space.get('name')}' references unknown luminaire '{item['luminaire_id']}'"
                )
            if item.get('quantity', 0) < 0:
                raise InvalidInputError("Luminaire quantity cannot be negative")
            total += lum['wattage'] * item.get('quantity', 0)

        lpd = total / area
        compliant: Optional[bool] = None
        if space.get('type') != CUSTOM_SPACE_TYPE:
            compliant = lpd <= space_type['max_lpd']

        results[space['id']] = {
            'name': space.get('name', space['id']),
            'type': space['type'],
            'area': area,
            'total_wattage': total,
            'lpd': lpd,
            'max_allowable_lpd': space_type['max_lpd'],
            'compliant': compliant,
            'control_required': space_type['automatic_control_required'],
        }

    assessed = [r['compliant'] for r in results.values() if r['compliant'] is not None]
    return {
        'spaces': results,
        'total_area': sum(r['area'] for r in results.values()),
        'overall_compliant': all(assessed),
    }
