# Kundli Engine - chart assembly
