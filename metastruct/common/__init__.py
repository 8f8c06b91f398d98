'''Structures shared by more than one format.'''
