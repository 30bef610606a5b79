"""Reviews app: guest ratings of completed campsite stays and host replies."""
