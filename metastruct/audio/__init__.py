'''Audio formats.'''
