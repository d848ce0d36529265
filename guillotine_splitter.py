from slab_geometry import FreeRect


def split_free_rect(pool, index, placed_width, placed_height, min_usable):
    """
    Replace pool[index] with the guillotine remainders of a placement.

    The placed footprint (kerf included) sits in the rectangle's top-left
    corner. The right remainder keeps the footprint's height, the bottom
    remainder spans the full width, so the two never share area. Remainders
    no larger than ``min_usable`` are not added. Right is appended before
    bottom; later tie-breaks depend on that order.
    """
    chosen = pool.pop(index)

    right_width = chosen.width - placed_width
    if right_width > min_usable:
        pool.append(FreeRect(chosen.x + placed_width, chosen.y, right_width, placed_height))

    bottom_height = chosen.height - placed_height
    if bottom_height > min_usable:
        pool.append(FreeRect(chosen.x, chosen.y + placed_height, chosen.width, bottom_height))

    return chosen
