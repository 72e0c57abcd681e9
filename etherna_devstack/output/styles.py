class Style:
    regular = 'default'
    context = 'grey50'
    info = 'bold'
    mark_neutral = 'cyan'
    good = 'green'
    suspicious = 'yellow'
    bad = 'red'
    url = 'bold bright_cyan'
