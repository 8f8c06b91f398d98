'''Image formats.'''
