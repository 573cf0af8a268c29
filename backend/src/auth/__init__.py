"""Authorization: portal roles and actor resolution from gateway headers"""
