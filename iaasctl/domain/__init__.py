"""
Domain layer organised by bounded context:

- core/: shared exception hierarchy
- machine/: machine aggregate and catalog port
- provider/: IaaS provider port and binding
- heal/: healer port and results
"""
