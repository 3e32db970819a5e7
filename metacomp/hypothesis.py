from hypothesis import strategies as st

processor_names = lambda: st.from_regex(r"[a-z][a-z_]{0,7}", fullmatch=True)


def ordering(after, before, draw):
    """
    Encode after/before constraints in one of the accepted declaration forms.
    """
    if before:
        options = {"before": before if len(before) > 1 else before[0]}
        if after:
            options["after"] = after
        return options
    if not after:
        return draw(st.sampled_from([None, {}]))
    if len(after) == 1:
        return draw(st.sampled_from([after[0], after, {"after": after[0]}]))
    return draw(st.sampled_from([after, {"after": after}]))


@st.composite
def processor_declarations(draw, min_size=1, max_size=8):
    """
    Acyclic processor declarations using all supported syntaxes.

    Constraints always respect the order in which names are drawn, so the
    declaration can always be sorted.
    """
    names = draw(
        st.lists(processor_names(), min_size=min_size, max_size=max_size, unique=True)
    )
    declaration = {}
    for i, name in enumerate(names):
        after = draw(st.lists(st.sampled_from(names[:i]), unique=True)) if i else []
        rest = names[i + 1 :]
        before = draw(st.lists(st.sampled_from(rest), unique=True)) if rest else []
        declaration[name] = ordering(after, before, draw)
    return declaration


def processor_lists(min_size=1, max_size=8):
    """
    Declarations given as plain lists of names.
    """
    return st.lists(processor_names(), min_size=min_size, max_size=max_size, unique=True)
